"""LLM 消息与模板模型"""

from typing import Literal, Union
from pydantic import BaseModel, Field


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant", "tool"]
    content: str


class PromptTemplate(BaseModel):
    """提示词模板：content 为字符串时视为单条 user 消息"""
    id: str
    name: str = ""
    content: Union[str, list[ChatMessage]] = Field(default_factory=list)

    def is_empty(self) -> bool:
        if isinstance(self.content, str):
            return not self.content.strip()
        return not self.content
