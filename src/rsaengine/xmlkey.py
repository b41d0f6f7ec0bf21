"""The XML key-exchange encoding (`<RSAKeyValue>`) of RSA parameters.

Element order on output is fixed: Modulus, Exponent, then for private keys P, Q, DP, DQ, InverseQ (each only if
present) followed by D. Contents are base64, with no whitespace and no XML declaration. Parsing accepts the elements
in any order.

Typical usage example:

    text = to_xml_string(engine.export_parameters(True), True)
    params = from_xml_string(text)
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import base64
from xml.etree import ElementTree

from rsaengine.errors import MissingParameterError
from rsaengine.parameters import RSAParameters

ROOT_TAG = "RSAKeyValue"

# (element tag, RSAParameters field)
PUBLIC_ELEMENTS = (("Modulus", "modulus"), ("Exponent", "exponent"))
CRT_ELEMENTS = (("P", "p"), ("Q", "q"), ("DP", "dp"), ("DQ", "dq"), ("InverseQ", "inverse_q"))
PRIVATE_ELEMENT = ("D", "d")

_TAG_TO_FIELD = dict(PUBLIC_ELEMENTS + CRT_ELEMENTS + (PRIVATE_ELEMENT,))


def _b64(data: bytes | bytearray) -> str:
    return base64.b64encode(data).decode("ascii")


def to_xml_string(params: RSAParameters, include_private: bool = False) -> str:
    """Serializes parameters to the `<RSAKeyValue>` encoding.

    Args:
        params: The parameters to serialize. Modulus and exponent are mandatory, and so is D if `include_private`.
        include_private: Whether to emit the private elements.

    Returns:
        The XML text.

    Raises:
        TypeError: If the modulus or the exponent is missing from `params`.
        MissingParameterError: If `include_private` is set but `params` holds no private exponent.
    """
    if include_private and not params.is_private():
        raise MissingParameterError("Missing private key")
    root = ElementTree.Element(ROOT_TAG)
    for tag, field in PUBLIC_ELEMENTS:
        ElementTree.SubElement(root, tag).text = _b64(getattr(params, field))
    if include_private:
        for tag, field in CRT_ELEMENTS:
            value = getattr(params, field)
            if value is not None:
                ElementTree.SubElement(root, tag).text = _b64(value)
        tag, field = PRIVATE_ELEMENT
        ElementTree.SubElement(root, tag).text = _b64(getattr(params, field))
    return ElementTree.tostring(root, encoding="unicode")


def from_xml_string(text: str) -> RSAParameters:
    """Parses the `<RSAKeyValue>` encoding.

    Unknown elements are ignored and empty elements count as absent. Presence of the mandatory elements is checked on
    import, not here.

    Args:
        text: The XML text.

    Returns:
        The decoded parameters.

    Raises:
        ValueError: If the root element is not `RSAKeyValue`.
        binascii.Error: If an element holds malformed base64.
        xml.etree.ElementTree.ParseError: If the text is not well-formed XML.
    """
    root = ElementTree.fromstring(text.strip())
    if root.tag != ROOT_TAG:
        raise ValueError(f"Root element {root.tag} does not match {ROOT_TAG}")
    fields = {}
    for child in root:
        field = _TAG_TO_FIELD.get(child.tag)
        content = "".join((child.text or "").split())
        if field is None or not content:
            continue
        fields[field] = bytearray(base64.b64decode(content, validate=True))
    return RSAParameters(**fields)
