"""Restoration prompt compilation.

Each restoration mode selects a fixed instruction that is sent to the
generative model together with the uploaded photo.  Every instruction opens
with the same base sentence and then describes what to remove and how to
reconstruct the covered areas.

The mapping is total: any value that is not a known mode (including
``None`` and the empty string) compiles to the ``default`` instruction.
Callers never need to validate the mode before building a prompt.

Usage
-----
::

    instruction = build_prompt("enhance_clarity")
    instruction = build_prompt("something-unknown")  # default instruction
"""

from __future__ import annotations

from enum import Enum


class RestorationMode(str, Enum):
    """Named restoration intents offered to the user."""

    REMOVE_DISTRACTIONS = "remove_distractions"
    FIX_ARTIFACTS = "fix_artifacts"
    ENHANCE_CLARITY = "enhance_clarity"
    DEEP_RESTORATION = "deep_restoration"
    DEFAULT = "default"


_BASE_PROMPT = (
    "Generate a restored version of this image that maintains all the important content but"
)

_MODE_INSTRUCTIONS: dict[RestorationMode, str] = {
    RestorationMode.REMOVE_DISTRACTIONS: (
        "removes all distracting visual elements, text overlays, and unnecessary markings. "
        "Focus on making the image look clean and professional as if it was originally "
        "captured without any visual noise or overlays. "
        "Preserve the original subject, colors, and composition but eliminate any visual "
        "elements that appear artificially added. "
        "Ensure the restored areas blend naturally with the surrounding image content."
    ),
    RestorationMode.FIX_ARTIFACTS: (
        "fixes any visual artifacts, text overlays, or markings that detract from the image "
        "quality. "
        "Remove any artificial elements including graphical overlays, visible stamps, or "
        "repeating patterns that appear to be added after the image was taken. "
        "Reconstruct the underlying image content naturally to match the surrounding areas "
        "in texture and color. "
        "The final result should look like a clean, professional photograph without any "
        "post-capture additions."
    ),
    RestorationMode.ENHANCE_CLARITY: (
        "enhances overall clarity by removing any noise, text elements, or visual distractions. "
        "Remove anything that appears superimposed on the original photograph, including text, "
        "logos, or semi-transparent elements. "
        "Seamlessly restore any areas that were covered by visual noise or add-ons, maintaining "
        "consistent lighting and texture. "
        "The result should appear as a pristine version of the original photograph with no "
        "extraneous elements."
    ),
    RestorationMode.DEEP_RESTORATION: (
        "performs a complete restoration by removing all non-original elements from the image. "
        "Eliminate any and all artificially added elements, including text overlays, logos, "
        "stamps, graphical elements, or repetitive patterns. "
        "Perfectly reconstruct the underlying image content where these elements were present, "
        "ensuring natural continuation of textures, colors, and patterns. "
        "Make the image look completely natural as if nothing was ever added to the original "
        "photograph. "
        "Pay special attention to corner elements and semi-transparent overlays, ensuring they "
        "are completely removed."
    ),
    RestorationMode.DEFAULT: (
        "improves the overall quality by removing distractions and enhancing clarity. "
        "Remove any elements that appear to be artificially added to the original photograph. "
        "Restore the image to how it would have looked if captured without any "
        "post-processing additions."
    ),
}

# Labels shown by the frontend.  Ordered as they appear in the mode picker.
_MODE_LABELS: dict[RestorationMode, str] = {
    RestorationMode.REMOVE_DISTRACTIONS: "Remove Distractions",
    RestorationMode.FIX_ARTIFACTS: "Fix Artifacts",
    RestorationMode.ENHANCE_CLARITY: "Enhance Clarity",
    RestorationMode.DEEP_RESTORATION: "Deep Restoration",
}


def normalize_mode(value: str | RestorationMode | None) -> RestorationMode:
    """Map an arbitrary mode value onto a :class:`RestorationMode`.

    Args:
        value: Mode string as received from the client, or an enum member.

    Returns:
        The matching mode, or :attr:`RestorationMode.DEFAULT` when the value
        is missing or unknown.
    """
    if isinstance(value, RestorationMode):
        return value
    try:
        return RestorationMode((value or "").strip())
    except ValueError:
        return RestorationMode.DEFAULT


def build_prompt(mode: str | RestorationMode | None) -> str:
    """Compile the instruction text for a restoration mode.

    Args:
        mode: Requested restoration mode.  Unknown values fall back to the
            ``default`` instruction.

    Returns:
        The base sentence followed by the mode-specific instruction.
    """
    return f"{_BASE_PROMPT} {_MODE_INSTRUCTIONS[normalize_mode(mode)]}"


def available_modes() -> list[dict[str, str]]:
    """Return the user-selectable modes with their display labels."""
    return [{"id": mode.value, "label": label} for mode, label in _MODE_LABELS.items()]
