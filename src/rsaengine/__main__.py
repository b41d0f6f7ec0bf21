"""The Command Line Interface for the engine, including Interactive elements.

A hybrid CLI/ICLI that prompts for whatever the command line left out, unless `--non-interactive` is given. Keys travel
as `<RSAKeyValue>` XML, inline or through stdin (`-`); messages as hex. Nothing is read from or written to files.

Typical usage example:

    rsaengine -n keygen --keysize 2048 --private
    OR
    python -m rsaengine encrypt --key - --message 2a
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import base64
import logging
import sys
import typing
from xml.etree import ElementTree

import rsaengine


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Type = str
    choices: list[str] | None = None
    default: typing.Any = None
    advanced: bool = False


help_dict: dict[str, HelpData] = {
    "subcommand":
        HelpData(
            description="The available subcommands in RSA Engine.",
            choices=["keygen", "encrypt", "decrypt", "export-der"],
        ),
    "keygen":
        HelpData("Key generation utility. Prints the key as XML."),
    "encrypt":
        HelpData("Raw public-key operation. Prints hex."),
    "decrypt":
        HelpData("Raw private-key operation. Prints hex."),
    "export-der":
        HelpData("PKCS#1 DER export. Prints base64."),
    "key":
        HelpData(
            description="The <RSAKeyValue> XML key, or - to read it from stdin.",
            format=str,
        ),
    "message":
        HelpData(
            description="The big-endian message representative, as hex. No padding is applied.",
            format=str,
        ),
    "keysize":
        HelpData(
            description=f"Key size (in bits), {rsaengine.LEGAL_KEY_SIZES.min_size} to "
            f"{rsaengine.LEGAL_KEY_SIZES.max_size} in steps of {rsaengine.LEGAL_KEY_SIZES.skip}.",
            format=int,
            default=rsaengine.DEFAULT_KEY_SIZE,
        ),
}

needs = {
    "keygen": ("keysize",),
    "encrypt": ("key", "message"),
    "decrypt": ("key", "message"),
    "export-der": ("key",),
}

keyarg = argparse.ArgumentParser(add_help=False)
keyarg.add_argument("--key", "-k", type=help_dict["key"].format, help=help_dict["key"].description)
payloads = argparse.ArgumentParser(add_help=False)
payloads.add_argument("--message", "-m", type=help_dict["message"].format, help=help_dict["message"].description)
private = argparse.ArgumentParser(add_help=False)
private.add_argument("--private", "-P", action="store_true", help="Include the private parameters.")
corep = argparse.ArgumentParser(prog="rsaengine")
corep.add_argument("--version", "-v", action="version", version=f"%(prog)s {rsaengine.__version__}")
corep.add_argument("--non-interactive", "-n", action="store_true", help="Enable non-interactive mode")
corep.add_argument("--advanced", "-a", action="store_true", help="Enable advanced mode, for interactive mode")
corep.add_argument("--verbose", "-V", action="store_true", help="Enable debug logging")
commands = corep.add_subparsers(dest="subcommand", title="Subcommands")

keygen = commands.add_parser("keygen", parents=[private], help=help_dict["keygen"].description)
keygen.add_argument("--keysize", type=help_dict["keysize"].format, help=help_dict["keysize"].description)
encrypt = commands.add_parser("encrypt", parents=[keyarg, payloads], help=help_dict["encrypt"].description)
decrypt = commands.add_parser("decrypt", parents=[keyarg, payloads], help=help_dict["decrypt"].description)
decrypt.add_argument("--no-blinding",
                     action="store_true",
                     help="Disable key blinding. Warning! Exposes the key to timing attacks.")
export_der = commands.add_parser("export-der", parents=[keyarg, private], help=help_dict["export-der"].description)


def checkmodes(arg: str, mode: tuple[bool, bool]):
    helper_data = help_dict[arg]
    if (mode[0] or (helper_data.advanced and not mode[1])) and helper_data.default is not None:
        return helper_data.default
    if mode[0]:
        raise IOError(f"Argument {arg} is missing and non-interactive mode is active.")
    return helper_data


def choice_handler(arg: str, mode: tuple[bool, bool], prntr: typing.Callable = print):
    helper_data = checkmodes(arg, mode)
    if not isinstance(helper_data, HelpData):
        return helper_data
    prntr(f"Please specify the {arg}!")
    prntr("Description: " + helper_data.description)
    for choice in helper_data.choices:
        if help_dict.get(choice, None):
            prntr(f"{choice} - {help_dict[choice].description}")
        else:
            prntr(choice)
    while True:
        ch = input(f"{arg}: ")
        if ch in helper_data.choices:
            return ch
        prntr("Please select an option from the list.")


def input_handler(arg: str, mode: tuple[bool, bool], prntr: typing.Callable = print):
    helper_data = checkmodes(arg, mode)
    if not isinstance(helper_data, HelpData):
        return helper_data
    prntr(f"Please specify the {arg}!")
    prntr("Description: " + helper_data.description)
    if helper_data.default is not None:
        prntr(f"Default value: {helper_data.default}")
        prntr("To accept default just click enter. Otherwise specify value.")
    cls = helper_data.format
    while True:
        ch = input(f"{arg}: ")
        if not ch and helper_data.default is not None:
            return helper_data.default
        if ch == "":
            prntr("Please provide a value.")
            continue
        try:
            return cls(ch)
        except ValueError:
            prntr(f"We could not convert your value to {cls.__name__}.")


def read_key(key: str) -> str:
    """Resolve the stdin marker."""
    if key == "-":
        return sys.stdin.read()
    return key


def main(argv: list[str] | None = None):
    """Core Hybrid CLI/ICLI (Command Line Interface/Interactive Command Line Interface)"""
    args = corep.parse_args(argv)
    pstatus = (args.non_interactive, args.advanced)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    def pspr(text: str):
        """Print only if not in non-interactive mode."""
        if not pstatus[0]:
            print(text)

    pspr("Welcome to RSA Engine!\n")
    if not args.subcommand:
        args.subcommand = choice_handler("subcommand", pstatus)
    for reqs in needs[args.subcommand]:
        if getattr(args, reqs, None) is None:
            if help_dict[reqs].choices is not None:
                res = choice_handler(reqs, pstatus)
            else:
                res = input_handler(reqs, pstatus)
            setattr(args, reqs, res)
        else:
            pspr(f"{reqs}: {getattr(args, reqs)}")
    pspr("\nInput Complete! Executing...")
    try:
        match args.subcommand:
            case "keygen":
                with rsaengine.RSAEngine(int(args.keysize)) as engine:
                    xml = engine.to_xml_string(getattr(args, "private", False))
                pspr("Key:")
                print(xml)
            case "encrypt":
                with rsaengine.RSAEngine() as engine:
                    engine.from_xml_string(read_key(args.key))
                    ciph = engine.encrypt_value(bytes.fromhex(args.message))
                pspr("Ciphertext:")
                print(ciph.hex())
            case "decrypt":
                with rsaengine.RSAEngine() as engine:
                    engine.from_xml_string(read_key(args.key))
                    if getattr(args, "no_blinding", False):
                        engine.use_key_blinding = False
                    clear = engine.decrypt_value(bytes.fromhex(args.message))
                pspr("Cleartext:")
                print(clear.hex())
            case "export-der":
                with rsaengine.RSAEngine() as engine:
                    engine.from_xml_string(read_key(args.key))
                    der = rsaengine.export_pkcs1(engine, getattr(args, "private", False))
                pspr("DER:")
                print(base64.b64encode(der).decode("ascii"))
    except (ValueError, ElementTree.ParseError) as err:
        print(f"Error: {err}", file=sys.stderr)
        sys.exit(1)
    pspr("Thank you for using RSA Engine!")
    pspr("Goodbye!")


if __name__ == "__main__":
    main()
