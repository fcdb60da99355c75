"""reddi - authenticated command-line pass-through for the Reddit API.

Obtains and refreshes OAuth2 tokens, persists them to disk, and performs
bearer-authenticated requests against https://oauth.reddit.com.
"""

from reddi.__version__ import __version__
from reddi.client import RedditClient

__all__ = ["__version__", "RedditClient"]
