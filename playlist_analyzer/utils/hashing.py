import hashlib


def sha256_hex(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def compute_prompt_hash(model: str, prompt: str, prompt_version: int) -> str:
    """
    Content hash identifying one (model, prompt template version, prompt) triple.

    The version is part of the hashed text so that bumping it yields new cache
    keys even when the rendered prompt did not change.
    """
    return sha256_hex(f"v{prompt_version}\n{model}\n{prompt}")
