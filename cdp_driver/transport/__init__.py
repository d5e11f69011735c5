from .directory import TargetDirectory
from .session import TransportSession
from .views import BrowserVersion, TargetInfo

__all__ = ['TransportSession', 'TargetDirectory', 'TargetInfo', 'BrowserVersion']
