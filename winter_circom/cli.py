"""winter-circom command line.

    winter-circom params OPTIONS_JSON --public-inputs N
    winter-circom create NAME OPTIONS_JSON --public-inputs N [--no-compile]
    winter-circom prove NAME OPTIONS_JSON PROOF_JSON PUBLIC_INPUTS_JSON [--no-generate]
    winter-circom verify NAME
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from winter_circom import __version__
from winter_circom.errors import WinterCircomError
from winter_circom.logging_level import LoggingLevel
from winter_circom.pipeline import circom_create, circom_verify, prove_from_stark_proof
from winter_circom.protocol.options import ProofOptions
from winter_circom.protocol.params import assemble_parameters, render_arguments
from winter_circom.protocol.proof import load_proof_from_json, to_int
from winter_circom.protocol.security import DEFAULT_SECURITY_BITS


def load_public_inputs(path: Path) -> List[int]:
    """Read a JSON array of public inputs (integers, decimal or 0x strings)."""
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise WinterCircomError(f"{path}: expected a JSON array of public inputs")
    try:
        return [to_int(v) for v in data]
    except (TypeError, ValueError) as e:
        raise WinterCircomError(f"{path}: invalid public input: {e}") from e


def _add_security_bits(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '--security-bits',
        type=int,
        default=DEFAULT_SECURITY_BITS,
        help=f'Soundness level of the query draws (default: {DEFAULT_SECURITY_BITS})'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='winter-circom',
        description='Generate Circom verifiers for STARK proofs and prove them with Groth16'
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument(
        '--root',
        type=Path,
        default=Path('.'),
        help='Project root holding final.ptau, circuits/ and target/ (default: .)'
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Show external tool output')
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Only report errors')

    sub = parser.add_subparsers(dest='command', required=True)

    params = sub.add_parser('params', help='Print the Verify template arguments')
    params.add_argument('options', type=Path, help='Proof options JSON file')
    params.add_argument('--public-inputs', type=int, required=True, help='Number of public inputs')
    _add_security_bits(params)

    create = sub.add_parser('create', help='Generate, compile and set up a verification circuit')
    create.add_argument('name', help='Circuit name (circuits/air/<name>.circom)')
    create.add_argument('options', type=Path, help='Proof options JSON file')
    create.add_argument('--public-inputs', type=int, required=True, help='Number of public inputs')
    create.add_argument('--no-compile', action='store_true', help='Only write verifier.circom')
    _add_security_bits(create)

    prove = sub.add_parser('prove', help='Prove a STARK proof with the Groth16 circuit')
    prove.add_argument('name', help='Circuit name')
    prove.add_argument('options', type=Path, help='Proof options JSON file')
    prove.add_argument('proof', type=Path, help='STARK proof JSON file')
    prove.add_argument('public_inputs', type=Path, help='Public inputs JSON array')
    prove.add_argument('--no-generate', action='store_true', help='Only write input.json')
    _add_security_bits(prove)

    verify = sub.add_parser('verify', help='Verify the Groth16 proof of a circuit')
    verify.add_argument('name', help='Circuit name')

    return parser


def _logging_level(args: argparse.Namespace) -> LoggingLevel:
    if args.verbose:
        return LoggingLevel.VERBOSE
    if args.quiet:
        return LoggingLevel.QUIET
    return LoggingLevel.DEFAULT


def run(args: argparse.Namespace) -> None:
    level = _logging_level(args)

    if args.command == 'params':
        options = ProofOptions.from_json(args.options)
        params = assemble_parameters(options, args.public_inputs, args.security_bits)
        print(render_arguments(params))
    elif args.command == 'create':
        options = ProofOptions.from_json(args.options)
        circom_create(
            options, args.name, args.public_inputs,
            root=args.root, security_bits=args.security_bits,
            compile=not args.no_compile, logging_level=level,
        )
    elif args.command == 'prove':
        options = ProofOptions.from_json(args.options)
        proof = load_proof_from_json(args.proof)
        public_inputs = load_public_inputs(args.public_inputs)
        prove_from_stark_proof(
            proof, public_inputs, options, args.name,
            root=args.root, security_bits=args.security_bits,
            generate=not args.no_generate, logging_level=level,
        )
    elif args.command == 'verify':
        circom_verify(args.name, root=args.root, logging_level=level)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=_logging_level(args).logging_level(), format='%(message)s')

    try:
        run(args)
    except (WinterCircomError, OSError, json.JSONDecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
