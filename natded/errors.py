from __future__ import annotations


class ProofEditorError(Exception):
    """Recoverable, user-facing failure. Session state is left untouched."""
    kind = "error"

    @property
    def message(self) -> str:
        return str(self)


class SelectionError(ProofEditorError):
    kind = "selection"


class ShapeError(ProofEditorError):
    kind = "shape"


class CompatibilityError(ProofEditorError):
    kind = "compatibility"


class InputError(ProofEditorError):
    kind = "input"


class PropParseError(InputError):
    def __init__(self, message: str, position: int = -1):
        super().__init__(message)
        self.position = position


class StalePromptError(ProofEditorError):
    kind = "stale_prompt"


class InternalInconsistencyError(AssertionError):
    """A referenced context or node does not exist; a defect in the caller."""
