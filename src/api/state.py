from typing import Optional

from api.backend import BackendAPI

# Global instance initialized at startup (or injected by tests)
backend: Optional[BackendAPI] = None
