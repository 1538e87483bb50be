from pathlib import Path


class RulesAppError(Exception):
    """Base user-facing application error."""


class RulesFileError(RulesAppError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")


class MissingSourceFileError(RulesFileError):
    def __init__(self, path: Path) -> None:
        super().__init__(path=path, message="Source file not found")


class TemplateNotFoundError(RulesFileError):
    def __init__(self, path: Path) -> None:
        super().__init__(path=path, message="Template not found")


class InvalidJsonFormatError(RulesFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid JSON format ({detail})")


class InvalidTemplateSchemaError(RulesFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid template schema ({detail})")


class InvalidRegistryError(RulesFileError):
    def __init__(self, path: Path, detail: str) -> None:
        self.detail = detail
        super().__init__(path=path, message=f"Invalid rule-set registry ({detail})")


class GitCommandError(RulesAppError):
    def __init__(self, args: list[str], detail: str) -> None:
        self.detail = detail
        super().__init__(f"git {' '.join(args)} failed: {detail}")
