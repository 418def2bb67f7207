"""Protocol layer: frame layout, command builders, and response parsing."""

from .framing import build_request, build_response, decode_payload, encode_payload
from .commands import Command, build_command
from .parser import CommandResult
