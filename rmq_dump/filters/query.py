from typing import Any
import json

import jq

from rmq_dump.filters.base import MessageFilter
from rmq_dump.model.message import parse_json
from rmq_dump.utils.logger import logger


def compile_query(expression: str) -> Any:
    """Compile a jq expression, raising ValueError if it is invalid."""
    return jq.compile(expression)


class JqQueryFilter(MessageFilter):
    """Evaluates a compiled jq program against the body parsed as JSON.

    Bodies that are not valid JSON are rejected. The program may yield any
    number of results and the first decisive one wins:

    - a boolean decides the outcome directly,
    - null is skipped,
    - any other value accepts the message unless its indented JSON encoding
      is blank.

    A program that yields nothing decisive rejects the message, as does a
    program that fails at runtime.
    """

    def __init__(self, program: Any):
        self.program = program

    def accepts(self, body: bytes) -> bool:
        try:
            data = parse_json(self.decode(body))
        except ValueError:
            return False

        try:
            for result in self.program.input_value(data):
                if isinstance(result, bool):
                    return result
                if result is None:
                    continue
                return json.dumps(result, indent=2).strip() != ""
        except ValueError as e:
            logger.debug(f"Error applying jq filter: {e}")
            return False

        return False
