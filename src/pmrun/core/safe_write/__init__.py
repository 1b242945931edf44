"""Safe file writing subpackage.

Stages content in uniquely named scratch files and publishes it with an atomic
rename so destinations are never left partially written.
"""

from pmrun.core.safe_write.scratch import (
    PROCESS_COUNTER,
    ScratchArea,
    ScratchAttempt,
    ScratchCollision,
    ScratchCreated,
    ScratchFailure,
    ScratchFile,
    ScratchNameCounter,
)
from pmrun.core.safe_write.writer import (
    SafeFileWriter,
    encode_content,
    get_default_writer,
    write_file_safe,
)

__all__ = [
    "PROCESS_COUNTER",
    "SafeFileWriter",
    "ScratchArea",
    "ScratchAttempt",
    "ScratchCollision",
    "ScratchCreated",
    "ScratchFailure",
    "ScratchFile",
    "ScratchNameCounter",
    "encode_content",
    "get_default_writer",
    "write_file_safe",
]
