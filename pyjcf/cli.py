#!/usr/bin/env python3
"""
Command-line interface for pyjcf - JVM class file decoder.
"""

import argparse
import logging
import sys
import zipfile

from .attributes import CodeAttribute, LineNumberTableAttribute
from .classfile import ClassFile, decode_class
from .classpath import load_class_bytes
from .elements import resolve_class
from .errors import ClassFormatError, DescriptorError
from .instructions import Instruction
from .log import get_hexdump, logger
from .opcodes import OPERAND_SHAPES


def _load(source_file: str, verbose: bool = False) -> ClassFile:
    """Read and decode one FILE argument; exit with status 1 on failure."""
    try:
        data = load_class_bytes(source_file)
    except (OSError, zipfile.BadZipFile) as e:
        print(f"Error: Cannot read {source_file}: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        return decode_class(data)
    except ClassFormatError as e:
        print(f"Error decoding {source_file}: {e}", file=sys.stderr)
        if verbose and e.offset is not None:
            print(get_hexdump(data, e.offset), file=sys.stderr)
        sys.exit(1)


def _print_info(source_file: str, cf: ClassFile):
    rc = resolve_class(cf)

    major, minor = rc.version
    print(f"{source_file}: version {major}.{minor}")
    if rc.source_file:
        print(f"  source: {rc.source_file}")
    header = " ".join(rc.modifiers + (rc.kind, rc.name))
    if rc.super_class:
        header += f" extends {rc.super_class}"
    if rc.interfaces:
        header += " implements " + ", ".join(rc.interfaces)
    print(f"  {header}")

    for f in rc.fields:
        prefix = "".join(f"{mod} " for mod in f.modifiers)
        line = f"    {prefix}{f.type.name} {f.name}  // {f.descriptor}"
        if f.constant_value is not None:
            line += f" = {f.constant_value!r}"
        print(line)

    for m in rc.methods:
        prefix = "".join(f"{mod} " for mod in m.modifiers)
        mt = m.method_type
        # MethodParameters may be missing or shorter than the descriptor
        names = list(m.parameter_names) + [None] * len(mt.parameter_types)
        params = ", ".join(
            f"{p.name} {name}" if name else p.name
            for p, name in zip(mt.parameter_types, names)
        )
        line = f"    {prefix}{mt.return_type.name} {m.name}({params})"
        if m.exceptions:
            line += " throws " + ", ".join(m.exceptions)
        print(f"{line}  // {m.descriptor}")


def info_command(args):
    """Print a summary of each class."""
    for source_file in args.files:
        cf = _load(source_file, args.verbose)
        try:
            _print_info(source_file, cf)
        except (ClassFormatError, DescriptorError) as e:
            print(f"Error resolving {source_file}: {e}", file=sys.stderr)
            sys.exit(1)


def _describe_operands(instr: Instruction, cf: ClassFile) -> str:
    """Render operands, resolving constant pool references where possible."""
    pool = cf.constant_pool
    shape = OPERAND_SHAPES[instr.opcode]
    if shape and shape[0] in ("cp1", "cp2"):
        index = instr.operands[0]
        try:
            return f"#{index} // {pool.text_of(index)}"
        except ClassFormatError:
            return f"#{index} // <invalid>"
    return ""


def _print_code(code: CodeAttribute, cf: ClassFile, lines: bool):
    pool = cf.constant_pool
    print(f"    max_stack={code.max_stack}, max_locals={code.max_locals}, "
          f"code_length={code.code_length}")
    for instr in code.instructions:
        comment = _describe_operands(instr, cf)
        text = f"{instr}  {comment}" if comment else str(instr)
        print(f"    {text}")
    for entry in code.exception_table:
        catch = "any" if entry.catches_all else pool.get_class_name(entry.catch_type)
        print(f"    try [{entry.start_pc}, {entry.end_pc}) -> {entry.handler_pc} catch {catch}")
    if lines:
        table = code.get_attribute(LineNumberTableAttribute)
        for row in table.line_number_table if table else ():
            print(f"    line {row.line_number}: {row.start_pc}")


def disasm_command(args):
    """Disassemble the methods of each class."""
    for source_file in args.files:
        cf = _load(source_file, args.verbose)
        pool = cf.constant_pool
        try:
            print(f"class {cf.name}")
            for method in cf.methods:
                name = pool.get_utf8(method.name_index)
                descriptor = pool.get_utf8(method.descriptor_index)
                print(f"\n  {name}{descriptor}")
                if method.code is None:
                    print("    (no code)")
                    continue
                _print_code(method.code, cf, args.lines)
        except ClassFormatError as e:
            print(f"Error resolving {source_file}: {e}", file=sys.stderr)
            sys.exit(1)


def pool_command(args):
    """Dump the constant pool of each class."""
    for source_file in args.files:
        cf = _load(source_file, args.verbose)
        pool = cf.constant_pool
        print(f"{source_file}: {len(pool) - 1} constant pool slots")
        for idx, entry in pool:
            try:
                text = pool.text_of(idx)
            except ClassFormatError as e:
                text = f"<{e}>"
            print(f"  #{idx:<5} {entry.tag.name:<20} {text}")


def main(argv=None):
    """Main entry point for pyjcf CLI."""
    parser = argparse.ArgumentParser(
        prog="pyjcf",
        description="Decode JVM class files",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log decoding progress and show a hex dump on errors",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    file_help = "Class files, or archive.jar!path/Name.class"

    # Info command
    info_parser = subparsers.add_parser(
        "info",
        help="Print class name, super class, interfaces, fields and methods",
    )
    info_parser.add_argument("files", nargs="+", help=file_help)
    info_parser.set_defaults(func=info_command)

    # Disasm command
    disasm_parser = subparsers.add_parser(
        "disasm",
        help="Print the bytecode of every method",
    )
    disasm_parser.add_argument("files", nargs="+", help=file_help)
    disasm_parser.add_argument(
        "-l", "--lines",
        action="store_true",
        help="Also print line number tables",
    )
    disasm_parser.set_defaults(func=disasm_command)

    # Pool command
    pool_parser = subparsers.add_parser(
        "pool",
        help="Print the constant pool",
    )
    pool_parser.add_argument("files", nargs="+", help=file_help)
    pool_parser.set_defaults(func=pool_command)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.verbose:
        logging.basicConfig(stream=sys.stderr, format="%(name)s: %(message)s")
        logger.setLevel(logging.DEBUG)

    args.func(args)


if __name__ == "__main__":
    main()
