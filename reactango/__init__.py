"""ReactTango CLI -- create new ReactTango projects from the template.

Clones the ReactTango template (TanStack Router + Django), resets its git
history, and installs backend and frontend dependencies.

Quick usage::

    from reactango import Config, ProjectBootstrapper, ProjectRequest

    bootstrapper = ProjectBootstrapper(Config())
    report = await bootstrapper.create(ProjectRequest.from_cli("my-app"))
"""

__version__ = "1.0.0"

from reactango.bootstrap import (
    BootstrapError,
    BootstrapReport,
    BootstrapState,
    CreateOptions,
    ProjectBootstrapper,
    ProjectRequest,
)
from reactango.config import Config

__all__ = [
    "__version__",
    "BootstrapError",
    "BootstrapReport",
    "BootstrapState",
    "Config",
    "CreateOptions",
    "ProjectBootstrapper",
    "ProjectRequest",
]
