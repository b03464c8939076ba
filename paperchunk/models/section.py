"""Paper section related data models."""

from typing import Dict, Any, Optional
from dataclasses import dataclass

# camelCase keys emitted by the upstream section splitter
_CAMEL_CASE_KEYS = {
    "parentHeading": "parent_heading",
    "startIndex": "start_index",
    "endIndex": "end_index",
    "cssSelector": "css_selector",
    "elementId": "element_id",
    "xPath": "x_path",
}


@dataclass(frozen=True)
class PaperSection:
    """A heading-delimited section of a research paper"""

    heading: str
    level: int
    content: str
    start_index: int = 0
    parent_heading: Optional[str] = None
    end_index: Optional[int] = None
    css_selector: Optional[str] = None
    element_id: Optional[str] = None
    x_path: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaperSection":
        """
        Build a section from a dictionary.

        Both snake_case keys and the camelCase keys produced by the
        section splitter are accepted. Unknown keys are ignored.

        Args:
            data: Section dictionary

        Returns:
            PaperSection instance

        Raises:
            ValueError: If heading or content is missing
        """
        normalized = {_CAMEL_CASE_KEYS.get(key, key): value for key, value in data.items()}

        missing = [key for key in ("heading", "content") if normalized.get(key) is None]
        if missing:
            raise ValueError(f"Section is missing required fields: {', '.join(missing)}")

        return cls(
            heading=normalized["heading"],
            level=int(normalized.get("level", 1)),
            content=normalized["content"],
            start_index=int(normalized.get("start_index", 0)),
            parent_heading=normalized.get("parent_heading"),
            end_index=normalized.get("end_index"),
            css_selector=normalized.get("css_selector"),
            element_id=normalized.get("element_id"),
            x_path=normalized.get("x_path"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "heading": self.heading,
            "level": self.level,
            "content": self.content,
            "start_index": self.start_index,
            "parent_heading": self.parent_heading,
            "end_index": self.end_index,
            "css_selector": self.css_selector,
            "element_id": self.element_id,
            "x_path": self.x_path,
        }
