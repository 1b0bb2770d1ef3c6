"""Node and component identity models."""

from rigpreview.core.identity.models import ComponentKey, InstanceId

__all__ = ["ComponentKey", "InstanceId"]
