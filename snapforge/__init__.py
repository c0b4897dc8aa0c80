"""snapforge: visual-regression build client.

Drives one build against the Percy API:
  - Content-addressed resource manifest of local static assets
  - Upload of only the resources the service is missing, two at a time
  - HTML snapshots registered and finalized in dependency order
  - Build finalize with optional polling for the diff result
"""

__version__ = "0.4.0"

from snapforge.config import ClientConfig
from snapforge.core.session import BuildSession

__all__ = ["BuildSession", "ClientConfig", "__version__"]
