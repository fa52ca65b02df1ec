from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class ArticleRecord:
    url: str
    content: str
    title: str = ""
    author: str = ""
    image_url: str = ""
    publish_date: str = ""
    publish_time: str = ""
    language: str = ""
    is_translated: bool = False
    translated_title: Optional[str] = None
    translated_content: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise with the camelCase keys the presentation layer expects."""
        payload: dict[str, Any] = {
            "url": self.url,
            "title": self.title,
            "author": self.author,
            "imageUrl": self.image_url,
            "content": self.content,
            "publishDate": self.publish_date,
            "publishTime": self.publish_time,
            "language": self.language,
            "isTranslated": self.is_translated,
        }
        if self.is_translated:
            payload["translatedTitle"] = self.translated_title
            payload["translatedContent"] = self.translated_content
        return payload
