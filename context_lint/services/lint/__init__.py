from .service import LintService
from .config import LintConfig
from .models import LintResult

__all__ = ["LintService", "LintConfig", "LintResult"]
