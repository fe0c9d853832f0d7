"""The Command Line Interface for Cryptomorph.

Every subcommand takes its inputs positionally. Missing or surplus arguments and unknown subcommands print the usage
and exit with a non-zero status; failures during an operation print a message to stderr and exit with status 1.

Typical usage example:

    cryptomorph keygen 3072 keys/
    cryptomorph encrypt report.pdf keys/rsa_public.key report.enc
    OR
    python -m cryptomorph decrypt report.enc keys/rsa_private.key report.pdf
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import logging
import pathlib
import sys
import typing

import cryptomorph
from cryptomorph import hybrid
from cryptomorph import symmetric


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Type = str
    choices: list[str] | None = None
    default: typing.Any = None


help_dict: dict[str, HelpData] = {
    "keygen": HelpData("Generate an RSA key pair into a directory."),
    "encrypt": HelpData("Encrypt a file with AES + RSA (hybrid)."),
    "decrypt": HelpData("Decrypt a hybrid-encrypted file."),
    "aes-encrypt": HelpData("Encrypt a file directly with AES-256."),
    "aes-decrypt": HelpData("Decrypt a file encrypted with aes-encrypt."),
    "sign": HelpData("Sign a file with a private key."),
    "verify": HelpData("Verify a file signature with a public key."),
    "aes-keygen": HelpData("Print a random 256-bit AES key as hex."),
    "bits": HelpData("Key size (in bits), e.g. 4096.", format=int),
    "outdir": HelpData("Directory to write rsa_public.key and rsa_private.key into.", format=pathlib.Path),
    "input": HelpData("Input file.", format=pathlib.Path),
    "output": HelpData("Output file.", format=pathlib.Path),
    "public_key": HelpData("Location of the public key file.", format=pathlib.Path),
    "private_key": HelpData("Location of the private key file. rsa_public.key must sit next to it.",
                            format=pathlib.Path),
    "hex_key": HelpData("AES-256 key as 64 hexadecimal digits."),
    "signature": HelpData("Location of the signature file.", format=pathlib.Path),
    "rounds": HelpData("Miller-Rabin rounds per prime candidate.", format=int),
    "sha": HelpData("Specific SHA algorithm to use.", choices=["sha256", "sha384", "sha512"], default="sha256"),
    "pkcs": HelpData("Also write PKCS#1/PKCS#8 copies (rsa_public.pem, rsa_private.pem)."),
}


def _positional(parser: argparse.ArgumentParser, *names: str) -> None:
    for name in names:
        parser.add_argument(name, type=help_dict[name].format, help=help_dict[name].description)


sha = argparse.ArgumentParser(add_help=False)
sha.add_argument("--sha", "-s", choices=help_dict["sha"].choices, default=help_dict["sha"].default,
                 help=help_dict["sha"].description)
corep = argparse.ArgumentParser(prog="cryptomorph", description="Hybrid RSA/AES encryption tool.")
corep.add_argument("--version", "-v", action="version", version=f"%(prog)s {cryptomorph.__version__}")
corep.add_argument("--verbose", action="store_true", help="Enable debug logging")
commands = corep.add_subparsers(dest="subcommand", title="Subcommands", required=True)

keygen = commands.add_parser("keygen", help=help_dict["keygen"].description)
_positional(keygen, "bits", "outdir")
keygen.add_argument("--rounds", "-r", type=help_dict["rounds"].format, help=help_dict["rounds"].description)
keygen.add_argument("--pkcs", action="store_true", help=help_dict["pkcs"].description)

encrypt = commands.add_parser("encrypt", help=help_dict["encrypt"].description)
_positional(encrypt, "input", "public_key", "output")
decrypt = commands.add_parser("decrypt", help=help_dict["decrypt"].description)
_positional(decrypt, "input", "private_key", "output")

aes_encrypt = commands.add_parser("aes-encrypt", help=help_dict["aes-encrypt"].description)
_positional(aes_encrypt, "input", "hex_key", "output")
aes_decrypt = commands.add_parser("aes-decrypt", help=help_dict["aes-decrypt"].description)
_positional(aes_decrypt, "input", "hex_key", "output")

sign = commands.add_parser("sign", parents=[sha], help=help_dict["sign"].description)
_positional(sign, "input", "private_key", "signature")
verify = commands.add_parser("verify", parents=[sha], help=help_dict["verify"].description)
_positional(verify, "input", "public_key", "signature")

commands.add_parser("aes-keygen", help=help_dict["aes-keygen"].description)


def run(args: argparse.Namespace) -> int:
    """Executes a parsed command. Returns the process exit status."""
    match args.subcommand:
        case "keygen":
            key = cryptomorph.RSAPrivKey.generate(args.bits, rounds=args.rounds)
            cryptomorph.export_key_pair(key, args.outdir, args.pkcs)
            print(f"RSA key pair saved in: {args.outdir}")
        case "encrypt":
            hybrid.encrypt_file(args.input, args.public_key, args.output)
            print(f"Encrypted file saved in: {args.output}")
        case "decrypt":
            hybrid.decrypt_file(args.input, args.private_key, args.output)
            print(f"Decrypted file saved in: {args.output}")
        case "aes-encrypt":
            symmetric.encrypt_file(args.input, args.hex_key, args.output)
            print(f"AES file saved in: {args.output}")
        case "aes-decrypt":
            symmetric.decrypt_file(args.input, args.hex_key, args.output)
            print(f"Decrypted file saved in: {args.output}")
        case "sign":
            hybrid.sign_file(args.input, args.private_key, args.signature, args.sha)
            print(f"File signed: {args.signature}")
        case "verify":
            if not hybrid.verify_file(args.input, args.public_key, args.signature, args.sha):
                print("Signature invalid!")
                return 1
            print("Signature valid.")
        case "aes-keygen":
            print(symmetric.generate_key().hex())
    return 0


def main(argv: list[str] | None = None) -> None:
    """Parses the command line, runs the command and exits with its status."""
    args = corep.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    try:
        status = run(args)
    except (OSError, ValueError, ArithmeticError, RuntimeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    sys.exit(status)


if __name__ == "__main__":
    main()
