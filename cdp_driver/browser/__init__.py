from .context import BrowserContext
from .views import DocumentReference, PageContext

__all__ = ['BrowserContext', 'DocumentReference', 'PageContext']
