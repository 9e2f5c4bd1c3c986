"""
Article data model for aawire.
"""
from dataclasses import asdict, dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class Article:
    """
    A news article mapped from a NewsML document.
    """
    title: str
    summary: str
    content: str
    created_at: str
    category: str = ""
    city: str = ""
    images: Tuple[str, ...] = ()

    def to_dict(self) -> Dict:
        """
        Convert the article to a JSON-ready dictionary.

        Returns:
            Dictionary of article fields with images as a list
        """
        data = asdict(self)
        data['images'] = list(self.images)
        return data
