from pydantic import BaseModel, ConfigDict, Field


class TextGeneration(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., description="Story title, taken from the model output or generated locally")
    content: str = Field(..., description="Story body with paragraphs separated by blank lines")
    word_count: int = Field(..., ge=0)
    estimated_reading_time: int = Field(..., ge=0, description="Minutes at 200 words per minute")
    genre: str
    length: str
    provider: str = Field(..., description="Provider that produced the text, or 'fallback'")
    elapsed_time: float = Field(..., ge=0)
    failures: list[str] = Field(default_factory=list)

    @property
    def fallback_used(self) -> bool:
        return self.provider == "fallback"


class PromptEnhancement(BaseModel):
    model_config = ConfigDict(frozen=True)

    enhanced_prompt: str
    original_prompt: str
    genre: str
    length: str
    provider: str
    fallback_used: bool
