# =============================================================================
# Rendering Module
# =============================================================================
# Body template loading and rendering. The real template language is the
# workflow engine's; this module only defines the seam and a minimal
# ${name} substitution fallback.
# =============================================================================

from mailtask.rendering.engine import StringTemplateEngine, TemplateEngine, render_body

__all__ = ["TemplateEngine", "StringTemplateEngine", "render_body"]
