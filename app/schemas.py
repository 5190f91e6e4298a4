from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from promptcore.schema.types import ColumnMetadata, TableMetadata


# ---------------------------- schema ----------------------------
class ColumnModel(BaseModel):
    name: str
    data_type: str = ""
    is_primary_key: bool = False
    is_foreign_key: bool = False
    is_nullable: bool = True
    business_meaning: Optional[str] = None


class TableModel(BaseModel):
    name: str
    schema_name: str = Field(default="dbo", alias="schema")
    description: str = ""
    columns: List[ColumnModel] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    def to_metadata(self) -> TableMetadata:
        return TableMetadata(
            name=self.name,
            schema=self.schema_name,
            description=self.description,
            columns=tuple(ColumnMetadata(**c.model_dump()) for c in self.columns),
        )

    @classmethod
    def from_metadata(cls, t: TableMetadata) -> "TableModel":
        return cls(
            name=t.name,
            schema=t.schema,
            description=t.description,
            columns=[ColumnModel(**c.__dict__) for c in t.columns],
        )


class RelationshipModel(BaseModel):
    from_table: str
    to_table: str
    from_column: str
    to_column: str
    cardinality: str
    confidence: float


class SchemaRequest(BaseModel):
    query: str
    tables: Optional[List[TableModel]] = None

    model_config = ConfigDict(extra="ignore")


class SchemaResponse(BaseModel):
    tables: List[TableModel] = Field(default_factory=list)
    scores: Dict[str, float] = Field(default_factory=dict)
    strategy: str
    forced_tables: List[str] = Field(default_factory=list)
    relationships: List[RelationshipModel] = Field(default_factory=list)
    suggested_joins: List[str] = Field(default_factory=list)
    column_mappings: Dict[str, str] = Field(default_factory=dict)
    business_terms: List[str] = Field(default_factory=list)


# ---------------------------- prompts ----------------------------
class PromptRequest(BaseModel):
    query: str
    context: Optional[str] = None
    tables: Optional[List[TableModel]] = None

    model_config = ConfigDict(extra="ignore")


class PromptSectionModel(BaseModel):
    name: str
    title: str
    content: str
    type: str
    order: int
    metadata: Dict[str, Any] = Field(default_factory=dict)


class PromptResponse(BaseModel):
    prompt: str
    template_name: str
    template_version: str
    token_count: int
    fallback: bool = False
    sections: List[PromptSectionModel] = Field(default_factory=list)
    tables: List[str] = Field(default_factory=list)
    strategy: Optional[str] = None
    traces: List[Dict[str, Any]] = Field(default_factory=list)
    generated_at: datetime


# ---------------------------- templates ----------------------------
class TemplateRequest(BaseModel):
    name: str
    version: str
    content: str
    description: str = ""
    is_active: bool = True
    parameters: Optional[str] = None
    created_by: str = "System"


class TemplateResponse(BaseModel):
    id: Optional[int] = None
    name: str
    version: str
    content: str
    description: str = ""
    is_active: bool = True
    created_by: str = "System"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    usage_count: int = 0
    parameters: Optional[str] = None


# ---------------------------- learning ----------------------------
class FeedbackRequest(BaseModel):
    original_prompt: str
    generated_sql: str = ""
    feedback: str = "neutral"
    comments: str = ""
    user_id: Optional[str] = None


class FeedbackResponse(BaseModel):
    accepted: bool = True
    rating: int
    pattern: str


class InsightsResponse(BaseModel):
    prompt_pattern: str
    successful_patterns: List[str] = Field(default_factory=list)
    common_mistakes: List[str] = Field(default_factory=list)
    optimization_suggestions: List[str] = Field(default_factory=list)
    confidence_modifier: float = 0.0
    sample_count: int = 0
    confidence: Optional[float] = None
    optimized_prompt: Optional[str] = None


class LearningStatsResponse(BaseModel):
    total_feedback: int = 0
    average_rating: float = 0.0
    unique_users: int = 0
    popular_patterns: List[str] = Field(default_factory=list)
    last_updated: datetime
