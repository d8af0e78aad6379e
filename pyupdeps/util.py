import base64


def encode_contents(data: bytes) -> str:
    """Base64-encode raw file bytes for a commit file addition."""
    return base64.b64encode(data).decode("ascii")
