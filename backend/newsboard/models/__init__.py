from .user import User
from .entry import Entry, EntryKind
from .vote import Vote
from .site import Site, SITE_ID
