"""Per-request rendering state, overflow planning and view models.

The composer lives in :mod:`docgen.engine.composer` and is imported from
there (or from :mod:`docgen`), since it depends on the renderers.
"""

from .context import PageContext, RenderContext
from .overflow import OverflowPlan, OverflowPlanner
from .viewmodels import ViewModelBuilder, ViewModelFactory

__all__ = [
    "OverflowPlan",
    "OverflowPlanner",
    "PageContext",
    "RenderContext",
    "ViewModelBuilder",
    "ViewModelFactory",
]
