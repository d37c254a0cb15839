"""Compilation pipeline: parse, map, post-passes, print, patch."""

from __future__ import annotations

import logging
import re

from .backend.printer import print_program
from .frontend import parse as default_parse
from .mapper import Mapper
from .middleend import run_passes
from .options import QUOTES, Options

log = logging.getLogger("coffee2es.compiler")

# Synthesized empty statements can leave ";;" at the end of a line.
DOUBLE_SEMICOLON = re.compile(r";;+$", re.MULTILINE)


def compile(source: str, options: Options | None = None) -> str:
    """Compile CoffeeScript source text to ES6 source text.

    Raises TokenizeError or ParseError for malformed input, TranslationError
    for constructs with no mapping, and IllegalSourceError for valid source
    that JavaScript cannot express.
    """
    if options is None:
        options = Options()
    parse = options.parse if options.parse is not None else default_parse
    block = parse(source)
    log.debug("parsed %d top-level expressions", len(block.expressions))
    mapper = Mapper(options)
    program = mapper.transpile(block)
    run_passes(program)
    helpers = mapper.helper_definitions()
    if helpers:
        log.debug("emitting %d helpers", len(helpers))
        program.body[0:0] = helpers
    code = print_program(program, options.tab_width, QUOTES[options.quote])
    return patch(code)


def patch(code: str) -> str:
    """Textual cleanup of printed output."""
    return DOUBLE_SEMICOLON.sub(";", code)
