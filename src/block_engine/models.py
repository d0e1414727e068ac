"""
Pydantic models exchanged between the engine and its callers.
Strong typing to replace Dict[str, Any] usage at the engine boundary.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ToolInvocation(BaseModel):
    """Tool selected for a block instance and the arguments to call it with"""
    tool_id: str = Field(description="Backend tool identifier")
    params: Dict[str, Any] = Field(default_factory=dict, description="Normalized parameter set")


class TokenUsage(BaseModel):
    """Token counts reported by a model provider"""
    prompt: int = Field(default=0, ge=0, description="Input tokens")
    completion: int = Field(default=0, ge=0, description="Output tokens")
    total: int = Field(default=0, ge=0, description="Input plus output tokens")


class Cost(BaseModel):
    """Cost in USD of one model call"""
    input: float = Field(default=0.0, ge=0.0)
    output: float = Field(default=0.0, ge=0.0)
    total: float = Field(default=0.0, ge=0.0)


class ModelSettings(BaseModel):
    """Model selection of a router instance"""
    model: str = Field(min_length=1, description="Model name")
    api_key: Optional[str] = Field(default=None, description="User supplied API key")
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, ge=1)


class ModelRequest(BaseModel):
    """Request handed to a model invoker"""
    provider_id: str = Field(description="Resolved provider")
    model: str
    prompt: str
    api_key: Optional[str] = None
    temperature: float = Field(ge=0.0, le=2.0)
    max_tokens: int = Field(ge=1)


class ModelResponse(BaseModel):
    """Raw model output"""
    text: str = Field(default="")
    usage: Optional[TokenUsage] = None


class CandidateDestination(BaseModel):
    """Block the router may send execution to"""
    id: str = Field(min_length=1)
    type: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    config: Optional[Dict[str, Any]] = Field(default=None, description="Configured field values")
    current_state: Optional[Dict[str, Any]] = None


class SelectedPath(BaseModel):
    """Destination chosen by the router"""
    block_id: str
    block_type: Optional[str] = None
    block_title: Optional[str] = None


class RoutingDecision(BaseModel):
    """Validated routing outcome"""
    selected_id: str = Field(description="Id of exactly one supplied candidate")
    selected_path: SelectedPath
    model: str
    prompt: str = Field(default="", description="Prompt sent to the model")
    tokens: Optional[TokenUsage] = None
    cost: Optional[Cost] = None


class FieldView(BaseModel):
    """Field as presented for the current values of a block instance"""
    id: str
    title: str
    ui: str
    required: bool
    placeholder: Optional[str] = None
    options: List[str] = Field(default_factory=list)
