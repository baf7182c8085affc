"""
Failures raised by chop and stick.

Every error belongs to one of two categories, which the command-line
entry points turn into exit codes:

- bad input or an unmet precondition (exit code 1); nothing has been
  changed on disk yet.
- an I/O failure part-way through an operation (exit code 2). These carry
  the path involved and are never retried.
"""

EXIT_PRECONDITION = 1
EXIT_IO = 2


class ChopstickError(Exception):
    exit_code = EXIT_PRECONDITION
    message = "Operation failed"

    def __str__(self):
        return self.message


# ---------------- Planning ----------------

class PlanningError(ChopstickError):
    pass


class InvalidRequest(PlanningError):
    message = "Exactly one of part size or number of parts must be given"


class InvalidPartSize(PlanningError):
    def __init__(self, text):
        super().__init__(text)
        self.text = text

    def __str__(self):
        return f"Error parsing part size: {self.text!r}"


class InvalidNumParts(PlanningError):
    def __init__(self, text):
        super().__init__(text)
        self.text = text

    def __str__(self):
        return f"Failed to parse number of parts: {self.text!r}"


class PartSizeTooLarge(PlanningError):
    message = "Part size too large. File wouldn't be split"


class NumPartsTooLarge(PlanningError):
    message = "Number of parts too large. Each part would be less than 1 byte"


# ---------------- Preconditions ----------------

class PreconditionError(ChopstickError):
    pass


class InsufficientDiskSpace(PreconditionError):
    def __init__(self, path, needed):
        super().__init__(path, needed)
        self.path = path
        self.needed = needed

    def __str__(self):
        return f"Insufficient disk space near {self.path} ({self.needed} bytes needed)"


class PartFileAlreadyExists(PreconditionError):
    def __init__(self, path):
        super().__init__(path)
        self.path = path

    def __str__(self):
        return f"Part file already exists at {self.path}"


class OriginalFileAlreadyExists(PreconditionError):
    def __init__(self, path):
        super().__init__(path)
        self.path = path

    def __str__(self):
        return f"Refusing to overwrite existing file {self.path}"


class NotRecognised(PreconditionError):
    def __init__(self, path):
        super().__init__(path)
        self.path = path

    def __str__(self):
        return f"Not a file name that parts could belong to: {self.path!r}"


class BadParent(PreconditionError):
    def __init__(self, reason):
        super().__init__(reason)
        self.reason = reason

    def __str__(self):
        return f"Unable to determine or access parent folder: {self.reason}"


class NoParts(PreconditionError):
    message = "No parts were found to stick"


class IncompleteParts(PreconditionError):
    def __init__(self, found):
        super().__init__(found)
        self.found = list(found)

    def __str__(self):
        return (
            "Couldn't find all the parts to stick, only found the following: "
            f"{self.found}"
        )


# ---------------- I/O during transfer ----------------

class TransferError(ChopstickError):
    exit_code = EXIT_IO
    action = "access"

    def __init__(self, path, reason=None):
        super().__init__(path, reason)
        self.path = path
        self.reason = reason

    def __str__(self):
        text = f"Failed to {self.action} {self.path}"
        if self.reason is not None:
            text += f": {self.reason}"
        return text


class OriginalUnreadable(TransferError):
    action = "inspect original file"


class ReadFailed(TransferError):
    action = "read from"


class WriteFailed(TransferError):
    action = "write to"


class CreateFailed(TransferError):
    action = "create"


class TruncateFailed(TransferError):
    action = "truncate"


class RenameFailed(TransferError):
    action = "rename"


class DeleteFailed(TransferError):
    action = "delete"
