"""Preview session: state machine, isolation, correspondence and suppression."""

from rigpreview.session.correspondence import (
    CorrespondenceContext,
    CorrespondenceTracker,
    prepare_for_preview,
)
from rigpreview.session.guard import GuardPolicy, SelectionGuard, SelectionLostError
from rigpreview.session.interception import (
    DEFAULT_ALLOWED_PREFIXES,
    HookInterceptor,
    InterceptionPolicy,
    is_allowed,
    owner_module,
)
from rigpreview.session.isolation import (
    ActivationRecord,
    PreviewCopy,
    deactivate_roots,
    destroy_preview_copy,
    find_isolable_roots,
    owning_root,
    path_occurrence,
    prepare_preview_copy,
    restore_activation,
    strip_components,
)
from rigpreview.session.machine import PreviewSession
from rigpreview.session.models import (
    IsolationError,
    SessionExistsError,
    SessionMode,
    SessionState,
    ValidationResult,
)
from rigpreview.session.prevention import (
    MODULAR_AVATAR,
    VRCFURY,
    AutomationFamily,
    AutomationSwitchboard,
    families_for,
)

__all__ = [
    # Machine
    "PreviewSession",
    "SessionState",
    "SessionMode",
    "ValidationResult",
    "SessionExistsError",
    "IsolationError",
    # Correspondence
    "CorrespondenceContext",
    "CorrespondenceTracker",
    "prepare_for_preview",
    # Isolation
    "ActivationRecord",
    "PreviewCopy",
    "find_isolable_roots",
    "owning_root",
    "deactivate_roots",
    "restore_activation",
    "strip_components",
    "prepare_preview_copy",
    "path_occurrence",
    "destroy_preview_copy",
    # Suppression
    "DEFAULT_ALLOWED_PREFIXES",
    "InterceptionPolicy",
    "HookInterceptor",
    "owner_module",
    "is_allowed",
    "AutomationFamily",
    "AutomationSwitchboard",
    "VRCFURY",
    "MODULAR_AVATAR",
    "families_for",
    # Guard
    "GuardPolicy",
    "SelectionGuard",
    "SelectionLostError",
]
