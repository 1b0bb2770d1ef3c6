"""Preview session state machine.

A session walks one preview through its lifecycle, driven by the host's
simulated-mode transitions:

    IDLE --request_start--> AWAITING_ISOLATION
    AWAITING_ISOLATION --EXITING_EDIT--> ISOLATING
    ISOLATING --ENTERED_SIMULATION--> ACTIVE
    ACTIVE --request_exit / EXITING_SIMULATION--> AWAITING_RESTORE
    AWAITING_RESTORE --ENTERED_EDIT--> IDLE

Isolation captures the baseline, suppresses untrusted hooks and automation,
hides every isolable root and puts an active, stripped copy of the chosen
root in its place. Saving diffs the copy against the baseline into a durable
buffer; restoring undoes the isolation and applies the buffered changes to
the original, found again by scene path.

Usage:
    session = PreviewSession.create(host, settings)
    session.request_start(component=bone)
    ...  # user edits session.clone_root
    session.save_and_exit()
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any

from rigpreview.changes import (
    ChangeSet,
    FileChangeBuffer,
    PendingChanges,
    apply_change_set,
    diff,
)
from rigpreview.changes.buffer import ChangeBuffer
from rigpreview.config import PreviewSettings, configure_logging, load_settings
from rigpreview.core.component import get_registry
from rigpreview.core.path import find_by_scene_path, scene_path
from rigpreview.rig import PhysBone
from rigpreview.scene.node import Node
from rigpreview.scene.protocol import Host, HostTransition
from rigpreview.session.correspondence import CorrespondenceTracker, prepare_for_preview
from rigpreview.session.guard import GuardPolicy, SelectionGuard
from rigpreview.session.interception import HookInterceptor, InterceptionPolicy
from rigpreview.session.isolation import (
    ActivationRecord,
    deactivate_roots,
    destroy_preview_copy,
    find_isolable_roots,
    find_owner,
    has_tracked_components,
    is_preview_copy,
    owning_root,
    path_occurrence,
    prepare_preview_copy,
    restore_activation,
)
from rigpreview.session.models import (
    IsolationError,
    SessionExistsError,
    SessionMode,
    SessionState,
    ValidationResult,
)
from rigpreview.session.prevention import AutomationSwitchboard, families_for
from rigpreview.snapshot import SnapshotStore

logger = logging.getLogger(__name__)

StateListener = Callable[[SessionState], None]

APPLIED_MESSAGE = "Physics changes applied!"
SAVED_MESSAGE = "Changes saved! Will apply on exit."
NO_CHANGES_MESSAGE = "No changes to save"
FAST_MODE_SAVE_MESSAGE = "Save not available in Fast Preview"
SAVE_FAILED_MESSAGE = "Error saving changes!"


class PreviewSession:
    """The single preview session of a process.

    Use ``create`` to construct it; a second ``create`` while one exists
    raises SessionExistsError until the first is disposed.

    Args:
        host: Environment the session runs in.
        settings: Preview settings; loaded from environment and preferences if None.
        buffer: Durable buffer for pending changes; from settings if None.
        interception: Policy for suppressing hook callbacks.
        guard_policy: Policy for keeping the preview target selected.
    """

    _instance: PreviewSession | None = None
    _lock = threading.Lock()

    @classmethod
    def create(
        cls,
        host: Host,
        settings: PreviewSettings | None = None,
        buffer: ChangeBuffer | None = None,
        interception: InterceptionPolicy | None = None,
        guard_policy: GuardPolicy | None = None,
    ) -> PreviewSession:
        """Create and attach the process-wide session.

        Raises:
            SessionExistsError: If a session already exists.
        """
        with cls._lock:
            if cls._instance is not None:
                raise SessionExistsError("A preview session already exists; dispose it first")
            session = cls(host, settings, buffer, interception, guard_policy)
            session._attach()
            cls._instance = session
            return session

    @classmethod
    def current(cls) -> PreviewSession | None:
        """The existing session, if any."""
        return cls._instance

    def __init__(
        self,
        host: Host,
        settings: PreviewSettings | None = None,
        buffer: ChangeBuffer | None = None,
        interception: InterceptionPolicy | None = None,
        guard_policy: GuardPolicy | None = None,
    ) -> None:
        self._host = host
        self._settings = settings if settings is not None else load_settings()
        if buffer is None and self._settings.change_buffer_path is not None:
            buffer = FileChangeBuffer(self._settings.change_buffer_path)
        self._pending = PendingChanges(buffer)
        self._snapshots = SnapshotStore()
        self._tracker = CorrespondenceTracker()
        self._interceptor = HookInterceptor(interception)
        self._switchboard: AutomationSwitchboard | None = None
        self._guard = SelectionGuard(
            host, guard_policy or GuardPolicy(max_ticks=self._settings.guard_ticks)
        )
        self._state = SessionState.IDLE
        self._mode = SessionMode.SAFE
        self._state_listeners: list[StateListener] = []
        self._original_root: Node | None = None
        self._clone_root: Node | None = None
        self._root_path: str | None = None
        self._root_occurrence = 0
        self._trigger_node: Node | None = None
        self._trigger_component: Any = None
        self._activation: list[ActivationRecord] = []
        self._control_surface_visible = False
        self._attached = False

    def _attach(self) -> None:
        configure_logging(self._settings)
        self._host.subscribe(self._on_transition)
        self._attached = True

    def dispose(self) -> None:
        """Detach from the host and release the process-wide slot."""
        if self._attached:
            self._host.unsubscribe(self._on_transition)
            self._attached = False
        with PreviewSession._lock:
            if PreviewSession._instance is self:
                PreviewSession._instance = None

    # Public state

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def mode(self) -> SessionMode:
        return self._mode

    @property
    def settings(self) -> PreviewSettings:
        return self._settings

    @property
    def is_active(self) -> bool:
        """True while the preview is running and edits can be made."""
        return self._state is SessionState.ACTIVE

    @property
    def clone_root(self) -> Node | None:
        """Root of the preview copy; None outside a preview and in fast mode."""
        return self._clone_root

    @property
    def original_root(self) -> Node | None:
        return self._original_root

    @property
    def preview_root(self) -> Node | None:
        """Subtree the user edits: the copy, or the original in fast mode."""
        return self._clone_root if self._clone_root is not None else self._original_root

    @property
    def control_surface_visible(self) -> bool:
        return self._control_surface_visible

    @property
    def has_pending_changes(self) -> bool:
        return self._pending.has_pending

    @property
    def correspondence(self) -> CorrespondenceTracker:
        return self._tracker

    @property
    def snapshots(self) -> SnapshotStore:
        return self._snapshots

    def add_state_listener(self, listener: StateListener) -> None:
        self._state_listeners.append(listener)

    def remove_state_listener(self, listener: StateListener) -> None:
        self._state_listeners.remove(listener)

    def _set_state(self, state: SessionState) -> None:
        if state is self._state:
            return
        logger.debug("Session state %s -> %s", self._state.name, state.name)
        self._state = state
        for listener in list(self._state_listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Session state listener failed")

    # Start

    def _validate(self, component: Any, node: Node | None) -> ValidationResult:
        scenes = self._host.scenes()
        roots = find_isolable_roots(scenes)
        if not roots:
            return ValidationResult.failure(
                "No rig found",
                "Physics preview needs at least one rig root (a node with an "
                "AvatarDescriptor) in the loaded scenes.",
            )
        eligible = [r for r in roots if has_tracked_components(r)]
        if not eligible:
            return ValidationResult.failure(
                "No physics components found",
                "None of the rigs in the loaded scenes has physics components to preview.",
            )

        if component is not None and node is None:
            node = find_owner(scenes, component)
            if node is None:
                return ValidationResult.failure(
                    "Component not in scene",
                    f"{type(component).__name__} is not attached to any node in the loaded scenes.",
                )
        registry = get_registry()
        if component is None and node is None:
            selection = self._host.get_selection()
            if selection is not None:
                if any(registry.is_tracked(type(c)) for c in selection.components):
                    node = selection
                elif owning_root(selection) in roots:
                    return ValidationResult.success(owning_root(selection))

        if node is not None and component is None:
            component = next(
                (c for c in node.components if registry.is_tracked(type(c))), None
            )

        if node is not None:
            root = owning_root(node)
            if root not in roots:
                logger.debug("%r is not below a rig root; using the first rig", node.name)
                root = eligible[0]
                node, component = None, None
            return ValidationResult.success(root, node, component)

        with_bones = [r for r in eligible if has_tracked_components(r, PhysBone)]
        return ValidationResult.success(with_bones[0] if with_bones else eligible[0])

    def request_start(self, component: Any = None, node: Node | None = None) -> ValidationResult:
        """Ask for a preview, optionally starting from a component or node.

        Root selection: the triggering component's (or node's) rig root; else
        the selected node's rig root; else the first rig with a PhysBone.

        Returns:
            The validation outcome. Failures are also shown to the user
            through the host; requests while a preview runs are ignored.
        """
        if self._state is not SessionState.IDLE:
            logger.warning("Preview already in progress (%s); start ignored", self._state.name)
            return ValidationResult.failure("Preview in progress", "A preview is already running.")
        if self._host.is_simulating:
            logger.warning("Host is already simulating; start ignored")
            return ValidationResult.failure(
                "Host busy", "Leave simulated mode before starting a preview."
            )

        result = self._validate(component, node)
        if not result:
            self._host.show_blocking_message(result.title, result.message)
            return result

        self._original_root = result.root
        self._trigger_node = result.trigger_node
        self._trigger_component = result.trigger_component
        self._mode = SessionMode.FAST if self._settings.fast_preview else SessionMode.SAFE
        logger.info(
            "Starting %s preview of %r", self._mode.name.lower(), result.root.name  # type: ignore[union-attr]
        )
        self._set_state(SessionState.AWAITING_ISOLATION)
        try:
            self._host.enter_simulation()
        except Exception:
            logger.exception("Host failed to enter simulated mode")
            self._rollback()
        return result

    # Host transitions

    def _on_transition(self, transition: HostTransition) -> None:
        state = self._state
        if transition is HostTransition.EXITING_EDIT:
            if state is SessionState.AWAITING_ISOLATION:
                self._isolate()
        elif transition is HostTransition.ENTERED_SIMULATION:
            if state is SessionState.ISOLATING:
                self._control_surface_visible = True
                self._set_state(SessionState.ACTIVE)
        elif transition is HostTransition.EXITING_SIMULATION:
            if state is SessionState.ACTIVE:
                self._begin_restore()
        elif transition is HostTransition.ENTERED_EDIT:
            if state is SessionState.AWAITING_RESTORE:
                self._restore()

    def _isolate(self) -> None:
        self._set_state(SessionState.ISOLATING)
        try:
            root = self._original_root
            if root is None:
                raise IsolationError("No root chosen for the preview")

            # Baseline first: isolation itself must not look like an edit
            baseline = self._snapshots.capture(root)
            self._root_path = scene_path(root)
            self._root_occurrence = path_occurrence(root)
            if self._pending.has_pending:
                logger.warning("Discarding pending changes left by an earlier preview")
                self._pending.clear()
            if self._trigger_component is not None and self._trigger_node is not None:
                self._tracker.set_context(
                    self._trigger_component, self._trigger_node, root, baseline
                )

            self._interceptor.start(self._host.hooks)
            self._switchboard = AutomationSwitchboard(families_for(self._settings))
            self._switchboard.start()

            if self._mode is SessionMode.SAFE:
                deactivate_roots(find_isolable_roots(self._host.scenes()), self._activation)
                # Tracked before preparation so a failure there still destroys it
                self._clone_root = self._host.instantiate(root)
                prepare_preview_copy(self._clone_root, root)

            self._focus(self.preview_root)  # type: ignore[arg-type]
            logger.info(
                "Isolated %r: %d tracked components captured", root.name, len(baseline)
            )
        except Exception:
            logger.exception("Failed to isolate preview; rolling back")
            self._rollback()

    def _focus(self, preview_root: Node) -> None:
        target = preview_root
        counterpart = self._tracker.resolve(preview_root)
        if counterpart is not None:
            target, instance = counterpart
            prepare_for_preview(instance)
        elif self._tracker.has_context:
            logger.warning("Preview counterpart not found; selecting the preview root")
        self._host.set_selection(target)
        self._host.spawn(self._guard.hold(target))

    def _rollback(self) -> None:
        """Best-effort undo of a partial isolation. Always ends in IDLE."""
        steps: tuple[tuple[str, Callable[[], Any]], ...] = (
            ("restore activation", lambda: restore_activation(self._activation, self._host)),
            ("destroy preview copy", self._destroy_copy),
            ("restore hooks", self._interceptor.stop),
            ("restore automation", self._stop_switchboard),
        )
        for name, step in steps:
            try:
                step()
            except Exception:
                logger.exception("Rollback step failed: %s", name)
        self._reset()

    def _destroy_copy(self) -> None:
        if self._clone_root is not None:
            destroy_preview_copy(self._host, self._clone_root)

    def _stop_switchboard(self) -> None:
        if self._switchboard is not None:
            self._switchboard.stop()
            self._switchboard = None

    def _reset(self) -> None:
        self._snapshots.clear()
        self._tracker.clear()
        self._activation = []
        self._clone_root = None
        self._original_root = None
        self._root_path = None
        self._root_occurrence = 0
        self._trigger_node = None
        self._trigger_component = None
        self._control_surface_visible = False
        self._set_state(SessionState.IDLE)

    # Exit

    def request_exit(self) -> bool:
        """End the running preview.

        Returns:
            True if an exit was started.
        """
        if self._state is not SessionState.ACTIVE:
            logger.debug("Exit ignored in state %s", self._state.name)
            return False
        self._begin_restore()
        self._host.exit_simulation()
        return True

    def toggle(self) -> bool:
        """Start a preview when idle, exit it when active.

        Returns:
            True if a start or exit was accepted.
        """
        if self._state is SessionState.IDLE:
            return bool(self.request_start())
        if self._state is SessionState.ACTIVE:
            return self.request_exit()
        logger.debug("Toggle ignored in state %s", self._state.name)
        return False

    def _begin_restore(self) -> None:
        self._control_surface_visible = False
        self._set_state(SessionState.AWAITING_RESTORE)

    def _restore(self) -> None:
        if self._mode is SessionMode.SAFE:
            try:
                restored = restore_activation(self._activation, self._host)
                logger.debug("Restored activation of %d roots", restored)
            except Exception:
                logger.exception("Failed to restore root activation")
            try:
                destroy_preview_copy(self._host, self._clone_root)
            except Exception:
                logger.exception("Failed to destroy preview copy")
        try:
            self._interceptor.stop()
        except Exception:
            logger.exception("Failed to restore hooks")
        try:
            self._stop_switchboard()
        except Exception:
            logger.exception("Failed to restore automation")
        try:
            self._apply_pending()
        finally:
            self._reset()

    def _apply_pending(self) -> None:
        change_set = self._pending.load()
        if change_set is None:
            self._pending.clear()
            return
        try:
            root = find_by_scene_path(
                self._host.scenes(),
                change_set.root,
                exclude=is_preview_copy,
                occurrence=self._root_occurrence,
            )
            if root is None:
                logger.error("Could not find original root at %s; changes dropped", change_set.root)
                return
            report = apply_change_set(root, change_set)
            for address in report.unrestorable:
                logger.warning("Cannot restore object reference %s", address)
            self._host.notify(APPLIED_MESSAGE)
        except Exception:
            logger.exception("Failed to apply pending changes")
        finally:
            self._pending.clear()

    # Save

    def save(self) -> bool:
        """Record the preview copy's changes for application on exit.

        Only accepted while ACTIVE in safe mode. An empty diff leaves any
        earlier saved changes in place.

        Returns:
            True if a non-empty change set was stored.
        """
        if self._state is not SessionState.ACTIVE:
            logger.warning("Save ignored: preview is not active (%s)", self._state.name)
            return False
        if self._mode is SessionMode.FAST:
            self._host.notify(FAST_MODE_SAVE_MESSAGE)
            return False
        if self._clone_root is None or self._original_root is None:
            logger.error("Save failed: preview roots are missing")
            self._host.notify(SAVE_FAILED_MESSAGE)
            return False

        if self._snapshots.is_empty:
            logger.info("No baseline captured; capturing from the original now")
            self._snapshots.capture(self._original_root)
            if self._snapshots.is_empty:
                logger.warning("Save aborted: no tracked components on the original")
                self._host.notify(SAVE_FAILED_MESSAGE)
                return False

        try:
            change_set = diff(self._clone_root, self._snapshots.baseline)
        except Exception:
            logger.exception("Failed to compute changes")
            self._host.notify(SAVE_FAILED_MESSAGE)
            return False

        if change_set.is_empty():
            logger.info("No changes detected")
            self._host.notify(NO_CHANGES_MESSAGE)
            return False

        change_set.root = self._root_path or scene_path(self._original_root)
        self._pending.store(change_set)
        logger.info(
            "Saved %d changed properties on %d components",
            change_set.property_count,
            len(change_set),
        )
        self._host.notify(SAVED_MESSAGE)
        return True

    def save_and_exit(self) -> bool:
        """Save, then exit. Exits even when there was nothing to save.

        Returns:
            True if changes were saved.
        """
        saved = self.save()
        self.request_exit()
        return saved

    def pending_change_set(self) -> ChangeSet | None:
        """Change set waiting to be applied on exit, if any."""
        return self._pending.load()

    def clear_pending_changes(self) -> None:
        """Drop saved changes so nothing is applied on exit."""
        self._pending.clear()
        logger.info("Pending changes cleared")
