import re


def normalize_whitespace(text: str) -> str:
    if not text:
        return ""
    text = str(text).strip()
    text = re.sub(r"\s+", " ", text)
    return text


def normalize_barcode(text: str) -> str:
    """
    Barcodes as string, no spaces. Spreadsheet cells read as floats lose
    their trailing ".0".
    """
    if text is None:
        return ""
    text = str(text).strip()
    text = text.replace(" ", "")
    if re.fullmatch(r"\d+\.0", text):
        text = text[:-2]
    return text


def normalize_phone(text: str) -> str:
    """
    Phone numbers keep digits and a leading '+':
    - "0300 123-4567" -> "03001234567"
    """
    if text is None:
        return ""
    text = str(text).strip()
    prefix = "+" if text.startswith("+") else ""
    return prefix + re.sub(r"\D", "", text)
