"""Image reference, repository name and tag validation.

Two source grammars are supported:

* Docker Hub: ``[registry[:port]/]path[/path...][:tag][@algorithm:hex]``
* GHCR: ``[ghcr.io/]namespace/repository[:tag]``

Both accept a pasted ``docker pull`` command. Every failing rule has its own
message so the form can say exactly what is wrong.
"""

from __future__ import annotations

import re

from mirror_commander.core.errors import ReferenceValidationError
from mirror_commander.models import SourceType
from mirror_commander.models.image import (
    DEFAULT_TAG,
    DOCKER_HUB_REGISTRY,
    ImageReference,
    SourceAutofill,
    ValidationResult,
)

REPOSITORY_NAME_MAX_LENGTH = 255
TAG_MAX_LENGTH = 128

_SEPARATORS = "._-"
_UPPERCASE_RE = re.compile(r"[A-Z]")
_REPOSITORY_CHARS_RE = re.compile(r"[a-z0-9._-]+")
_CONSECUTIVE_SEPARATORS_RE = re.compile(r"[._-]{2,}")
_TAG_CHARS_RE = re.compile(r"[A-Za-z0-9_.-]+")
_REGISTRY_RE = re.compile(
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?)*"
    r"(?::[0-9]+)?"
)
_DIGEST_RE = re.compile(r"[A-Za-z][A-Za-z0-9]*(?:[-_+.][A-Za-z][A-Za-z0-9]*)*:[0-9a-fA-F]{32,}")
_DOCKER_PULL_RE = re.compile(r"^docker\s+pull\s+")
_GHCR_PREFIX = "ghcr.io/"

_HINTS = {
    "repository": "Lowercase letters, digits and single '-', '_' or '.' separators; "
                  "no separator at the start or end",
    "tag": "Letters, digits, '_', '.' and '-', starting with a letter, digit or '_'; at most 128 characters",
    "image": "Format: [registry/]namespace/repository[:tag], e.g. nginx:alpine",
    "ghcr_image": "Format: namespace/repository[:tag], e.g. owner/repo:latest",
}


def validate_repository_name(name: str | None) -> ValidationResult:
    """Validate a repository path such as ``nginx`` or ``bitnami/redis``."""
    if not isinstance(name, str) or not name.strip():
        return ValidationResult.fail("repository name cannot be empty")
    if len(name) > REPOSITORY_NAME_MAX_LENGTH:
        return ValidationResult.fail(
            f"repository name cannot exceed {REPOSITORY_NAME_MAX_LENGTH} characters"
        )
    if _UPPERCASE_RE.search(name):
        return ValidationResult.fail("repository name must be lowercase")

    for component in name.split("/"):
        error = _component_error(component)
        if error:
            return ValidationResult.fail(error)
    return ValidationResult.ok()


def _component_error(component: str) -> str | None:
    if not component:
        return "repository name cannot contain an empty path component"
    if not _REPOSITORY_CHARS_RE.fullmatch(component):
        return "repository name may only contain lowercase letters, digits, '-', '_', '.' and '/'"
    if component[0] in _SEPARATORS or component[-1] in _SEPARATORS:
        return "repository name cannot start or end with '-', '_' or '.'"
    if _CONSECUTIVE_SEPARATORS_RE.search(component):
        return "repository name cannot contain consecutive separators"
    return None


def validate_tag(tag: str | None) -> ValidationResult:
    """Validate an image tag."""
    if not isinstance(tag, str) or not tag.strip():
        return ValidationResult.fail("tag cannot be empty")
    if len(tag) > TAG_MAX_LENGTH:
        return ValidationResult.fail(f"tag cannot exceed {TAG_MAX_LENGTH} characters")
    if not _TAG_CHARS_RE.fullmatch(tag):
        return ValidationResult.fail("tag may only contain letters, digits, '_', '.' and '-'")
    if tag[0] in ".-":
        return ValidationResult.fail("tag must start with a letter, digit or underscore")
    return ValidationResult.ok()


def validate_image_address(
    image_address: str | None,
    source_type: SourceType | str = SourceType.DOCKERHUB,
) -> ValidationResult:
    """Validate and parse a source image address for the given dialect."""
    if isinstance(source_type, str):
        source_type = SourceType.from_str(source_type)

    if not image_address or not isinstance(image_address, str):
        return ValidationResult.fail("image address cannot be empty")

    address = clean_address(image_address, source_type)
    if not address:
        return ValidationResult.fail("image address cannot be empty")

    if source_type is SourceType.GHCR:
        return _parse_ghcr(address)
    return _parse_docker_hub(address)


def clean_address(image_address: str, source_type: SourceType) -> str:
    """Trim, drop a pasted ``docker pull`` and, for GHCR, the registry host."""
    address = _DOCKER_PULL_RE.sub("", image_address.strip()).strip()
    if source_type is SourceType.GHCR and address.startswith(_GHCR_PREFIX):
        address = address[len(_GHCR_PREFIX):]
    return address


def _split_tag(address: str) -> tuple[str, str | None]:
    """Split ``name:tag``; a colon before the last slash is a registry port."""
    colon = address.rfind(":")
    if colon > address.rfind("/"):
        return address[:colon], address[colon + 1:]
    return address, None


def _looks_like_registry(component: str) -> bool:
    return "." in component or ":" in component or component == "localhost"


def _check_tag(tag: str | None) -> tuple[str, bool, str | None]:
    """Return (tag, defaulted, error)."""
    if tag is None:
        return DEFAULT_TAG, True, None
    result = validate_tag(tag)
    if not result.is_valid:
        return tag, False, f"invalid tag: {result.error}"
    return tag, False, None


def _parse_docker_hub(address: str) -> ValidationResult:
    digest = None
    if "@" in address:
        address, digest = address.split("@", 1)
        if not _DIGEST_RE.fullmatch(digest):
            return ValidationResult.fail("invalid digest: expected algorithm:hex, e.g. sha256:<64 hex digits>")

    remainder, raw_tag = _split_tag(address)

    registry = DOCKER_HUB_REGISTRY
    first, sep, rest = remainder.partition("/")
    if sep and _looks_like_registry(first):
        if not _REGISTRY_RE.fullmatch(first):
            return ValidationResult.fail(f"invalid registry host: {first}")
        registry, remainder = first, rest

    repo_check = validate_repository_name(remainder)
    if not repo_check.is_valid:
        return ValidationResult.fail(f"invalid repository name: {repo_check.error}")

    tag, defaulted, error = _check_tag(raw_tag)
    if error:
        return ValidationResult.fail(error)

    parsed = ImageReference(registry=registry, repository=remainder, tag=tag, digest=digest)
    return ValidationResult.ok(parsed, tag_defaulted=defaulted)


def _parse_ghcr(address: str) -> ValidationResult:
    if "@" in address:
        return ValidationResult.fail("digests are not supported for GHCR references")

    remainder, raw_tag = _split_tag(address)
    if len(remainder.split("/")) != 2:
        return ValidationResult.fail("GHCR reference must be in the form namespace/repository[:tag]")

    repo_check = validate_repository_name(remainder)
    if not repo_check.is_valid:
        return ValidationResult.fail(f"invalid repository name: {repo_check.error}")

    tag, defaulted, error = _check_tag(raw_tag)
    if error:
        return ValidationResult.fail(error)

    parsed = ImageReference(registry=SourceType.GHCR.default_registry, repository=remainder, tag=tag)
    return ValidationResult.ok(parsed, tag_defaulted=defaulted)


def parse_image_address(image_address: str, source_type: SourceType) -> ImageReference:
    """Like validate_image_address, but raise on invalid input."""
    result = validate_image_address(image_address, source_type)
    if not result.is_valid or result.parsed is None:
        raise ReferenceValidationError(result.error or "invalid image address")
    return result.parsed


def autofill_source(image_address: str, source_type: SourceType) -> SourceAutofill | None:
    """Normalize the source field once the user leaves it.

    Drops a pasted ``docker pull``, appends ``:latest`` when no tag was given
    and returns the tag the target tag field should take. Invalid input is
    left alone (None).
    """
    result = validate_image_address(image_address, source_type)
    if not result.is_valid or result.parsed is None:
        return None

    source = clean_address(image_address, source_type)
    if result.tag_defaulted:
        name, sep, digest = source.partition("@")
        source = f"{name}:{DEFAULT_TAG}{sep}{digest}"
    return SourceAutofill(source=source, target_tag=result.parsed.tag, tag_defaulted=result.tag_defaulted)


def validation_hint(kind: str) -> str:
    return _HINTS.get(kind, "")
