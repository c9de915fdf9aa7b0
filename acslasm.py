"""
ACSL Assembly to C Translator
==============================
Translates ACSL assembly text into the body of a C program, one statement
per source line, in a single pass.

Source format:
  - One instruction per line: [LABEL] OPCODE [LOC]
  - Tokens are separated by single spaces (runs of spaces are NOT collapsed)
  - LOC is either a literal (=123) or a variable name
  - DC always needs a label: the label names the memory cell it initializes

Generated C model:
  - int acc             the accumulator
  - int mem[MEM_SIZE]   one slot per distinct STORE / DC name
  - int MOD             arithmetic results are reduced % 1000000

Usage:
  from acslasm import translate, emit_program
  result = translate(source_text)
  c_text = emit_program(result, "prog.acsl")
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

PROG_NAME = "acslasmc v0.1"
PROG_NAME_LINE = f"{PROG_NAME} -- ACSL Assembly to C compiler"

LITERAL_MARKER = "="
MOD = 1_000_000
INDENT = "    "

# ---------------------------------------------------------------------------
#  Opcodes
# ---------------------------------------------------------------------------

class Arity(Enum):
    """What an opcode needs besides itself."""
    LOC = "loc"                  # operand required
    LOC_AND_LABEL = "loc+label"  # operand and a preceding label required
    NOTHING = "nothing"
    NOT_AN_OPCODE = "none"


class Opcode(Enum):
    LOAD = "LOAD"
    STORE = "STORE"
    ADD = "ADD"
    SUB = "SUB"
    MULT = "MULT"
    DIV = "DIV"
    BE = "BE"
    BG = "BG"
    BL = "BL"
    BU = "BU"
    READ = "READ"
    PRINT = "PRINT"
    END = "END"
    DC = "DC"


ARITY = {
    Opcode.LOAD:  Arity.LOC,
    Opcode.STORE: Arity.LOC,
    Opcode.ADD:   Arity.LOC,
    Opcode.SUB:   Arity.LOC,
    Opcode.MULT:  Arity.LOC,
    Opcode.DIV:   Arity.LOC,
    Opcode.BE:    Arity.LOC,
    Opcode.BG:    Arity.LOC,
    Opcode.BL:    Arity.LOC,
    Opcode.BU:    Arity.LOC,
    Opcode.READ:  Arity.LOC,
    Opcode.PRINT: Arity.LOC,
    Opcode.END:   Arity.NOTHING,
    Opcode.DC:    Arity.LOC_AND_LABEL,
}

# acc = (acc OP expr) % MOD
ARITH_OPS = {
    Opcode.ADD:  "+",
    Opcode.SUB:  "-",
    Opcode.MULT: "*",
    Opcode.DIV:  "/",
}

# if (acc COND) goto LOC;
# BG is missing on purpose: it classifies but generates nothing.
BRANCH_CONDS = {
    Opcode.BE: "== 0",
    Opcode.BU: "> 0",
    Opcode.BL: "< 0",
}

_MNEMONICS = {op.value: op for op in Opcode}


def lookup_opcode(token: str) -> Optional[Opcode]:
    """Map a mnemonic to its Opcode. Case-sensitive; None if unknown."""
    return _MNEMONICS.get(token)


def classify(token: str) -> Arity:
    """Classify any token. Never fails: unknown tokens are NOT_AN_OPCODE."""
    op = lookup_opcode(token)
    if op is None:
        return Arity.NOT_AN_OPCODE
    return ARITY[op]

# ---------------------------------------------------------------------------
#  Errors
# ---------------------------------------------------------------------------

class TranslateError(Exception):
    """Base for all translation failures.

    ``line`` is the 1-based source line; it is filled in by translate()
    once the failing line is known.
    """

    def __init__(self, msg: str, line: Optional[int] = None):
        self.msg = msg
        self.line = line
        super().__init__(msg)

    def __str__(self) -> str:
        if self.line is None:
            return self.msg
        return f"line {self.line}: error: {self.msg}"


class MissingOperand(TranslateError):
    def __init__(self, opcode: str):
        self.opcode = opcode
        super().__init__(f"missing loc: loc is required for opcode {opcode}")


class MissingLabel(TranslateError):
    def __init__(self, opcode: str):
        self.opcode = opcode
        super().__init__(f"missing label: label is required for opcode {opcode}")


class MissingOpcode(TranslateError):
    def __init__(self):
        super().__init__("missing opcode, only label provided")


class InvalidOpcode(TranslateError):
    def __init__(self, token: str):
        self.token = token
        super().__init__(f"invalid opcode: {token}")


class Unimplemented(TranslateError):
    def __init__(self, opcode: str):
        self.opcode = opcode
        super().__init__(f"{opcode} is unimplemented")

# ---------------------------------------------------------------------------
#  Symbol table / memory allocator
# ---------------------------------------------------------------------------

class SymbolTable:
    """Variable name -> memory slot. Slots are handed out 0, 1, 2, ...
    and never freed or reused."""

    def __init__(self):
        self.slots: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self.slots)

    def __contains__(self, name: str) -> bool:
        return name in self.slots

    @property
    def next_slot(self) -> int:
        return len(self.slots)

    def lookup(self, name: str) -> Optional[int]:
        return self.slots.get(name)

    def allocate(self, name: str) -> int:
        """Return the slot bound to *name*, binding the next free one first
        if the name is new."""
        slot = self.slots.get(name)
        if slot is not None:
            return slot
        slot = self.next_slot
        self.slots[name] = slot
        return slot


def resolve_operand(loc: str, symbols: SymbolTable) -> str:
    """Turn a LOC token into a C expression.

    '=5' -> '5' (passed through unchecked), a bound name -> 'mem[N]',
    anything else (empty token, unbound name) -> ''.
    """
    if not loc:
        return ""
    if loc[0] == LITERAL_MARKER:
        return loc[1:]
    slot = symbols.lookup(loc)
    if slot is None:
        return ""
    return f"mem[{slot}]"

# ---------------------------------------------------------------------------
#  Line parsing
# ---------------------------------------------------------------------------

@dataclass
class Instruction:
    """One decoded source line."""
    opcode: Opcode
    label: str = ""
    loc: str = ""


def tokenize(line: str) -> list[str]:
    """Split a trimmed line on single spaces. Blank lines give no tokens."""
    stripped = line.strip()
    if not stripped:
        return []
    return stripped.split(" ")


def _token(tokens: list[str], i: int) -> Optional[str]:
    return tokens[i] if i < len(tokens) else None


def parse_tokens(tokens: list[str]) -> Optional[Instruction]:
    """Decode one line's tokens. Returns None for a blank line."""
    if not tokens:
        return None

    first = tokens[0]
    kind = classify(first)
    if kind is Arity.LOC:
        loc = _token(tokens, 1)
        if loc is None:
            raise MissingOperand(first)
        return Instruction(lookup_opcode(first), loc=loc)
    if kind is Arity.NOTHING:
        return Instruction(lookup_opcode(first))
    if kind is Arity.LOC_AND_LABEL:
        raise MissingLabel(first)

    # First token is not an opcode, so it is a label
    mnem = _token(tokens, 1)
    if mnem is None:
        raise MissingOpcode()
    kind = classify(mnem)
    if kind is Arity.LOC or kind is Arity.LOC_AND_LABEL:
        loc = _token(tokens, 2)
        if loc is None:
            raise MissingOperand(mnem)
        return Instruction(lookup_opcode(mnem), label=first, loc=loc)
    if kind is Arity.NOTHING:
        return Instruction(lookup_opcode(mnem), label=first)
    raise InvalidOpcode(mnem)

# ---------------------------------------------------------------------------
#  Code generation
# ---------------------------------------------------------------------------

def generate(inst: Instruction, symbols: SymbolTable) -> str:
    """Emit the C statement for one instruction, including its code label."""
    op = inst.opcode
    expr = resolve_operand(inst.loc, symbols)

    if op is Opcode.LOAD:
        action = f"acc = {expr};"
    elif op is Opcode.STORE:
        action = f"mem[{symbols.allocate(inst.loc)}] = acc;"
    elif op in ARITH_OPS:
        action = f"acc = (acc {ARITH_OPS[op]} {expr}) % MOD;"
    elif op in BRANCH_CONDS:
        action = f"if (acc {BRANCH_CONDS[op]}) goto {inst.loc};"
    elif op is Opcode.END:
        action = "return 0;"
    elif op is Opcode.READ:
        # TODO: read an integer from stdin into the LOC slot
        raise Unimplemented(op.value)
    elif op is Opcode.PRINT:
        action = f'printf("%d\\n", {expr});'
    elif op is Opcode.DC:
        # DC's label names a memory cell, and its LOC is emitted raw
        return f"mem[{symbols.allocate(inst.label)}] = {inst.loc};"
    else:
        action = ""

    if inst.label:
        return f"{inst.label}:;\n{INDENT}{action}"
    return action


def translate_line(tokens: list[str], symbols: SymbolTable) -> str:
    """Translate one tokenized line. Blank lines give an empty statement."""
    inst = parse_tokens(tokens)
    if inst is None:
        return ""
    return generate(inst, symbols)

# ---------------------------------------------------------------------------
#  Whole-program translation
# ---------------------------------------------------------------------------

@dataclass
class Translation:
    statements: list[str] = field(default_factory=list)
    symbols: SymbolTable = field(default_factory=SymbolTable)

    @property
    def mem_size(self) -> int:
        return len(self.symbols)


def split_lines(source: str) -> list[str]:
    """Split on line feeds only. A trailing line feed does not start a new line."""
    lines = source.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def translate(source: str | Iterable[str]) -> Translation:
    """Translate a whole program, stopping at the first error.

    *source* is either the full text or an iterable of lines.  Raises a
    TranslateError subclass with ``line`` set to the failing line number.
    """
    lines = split_lines(source) if isinstance(source, str) else source
    result = Translation()
    for lineno, raw in enumerate(lines, 1):
        try:
            stmt = translate_line(tokenize(raw), result.symbols)
        except TranslateError as e:
            e.line = lineno
            raise
        result.statements.append(stmt)
    return result

# ---------------------------------------------------------------------------
#  C program wrapper
# ---------------------------------------------------------------------------

HEADER = f"""\
#include<stdio.h>

int get_mem_size();
int MOD = {MOD};

int main() {{
    int MEM_SIZE = get_mem_size();
    int acc = 0;
    int mem[MEM_SIZE];
    for (int i=0; i<MEM_SIZE; i++) {{
        mem[i] = 0;
    }}
"""

PRE_FOOTER = """\
}

int get_mem_size() {
"""

FOOTER = "}"


def emit_program(result: Translation, source_name: str = "<stdin>") -> str:
    """Wrap translated statements in the fixed C header and footer."""
    out = [f"// generated from ACSL assembly source '{source_name}' by {PROG_NAME}\n"]
    out.append(HEADER + "\n")
    for stmt in result.statements:
        out.append(f"{INDENT}{stmt}\n")
    out.append(f"{PRE_FOOTER}{INDENT}return {result.mem_size};\n{FOOTER}\n\n")
    return "".join(out)


def compile_source(source: str, source_name: str = "<stdin>") -> str:
    """Translate *source* and return the complete C program text."""
    return emit_program(translate(source), source_name)
