from pydantic import BaseModel, Field


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class RbacRules(BaseModel):
    roles: dict[str, list[str]]
    public_permissions: list[str] = Field(default_factory=list)

class SlugRules(BaseModel):
    # Attempts per unit of work before a slug/tag race becomes a Conflict
    max_attempts: int = Field(default=3, ge=1, le=10)

class ContentRules(BaseModel):
    title_max: int = 200
    excerpt_max: int = 500
    tag_name_max: int = 50
    max_tags_per_post: int = 20
    comment_max: int = 2000
    message_max: int = 1000

class PaginationRules(BaseModel):
    default_limit: int = 10
    max_limit: int = 100

class SecurityRules(BaseModel):
    allowed_url_schemes: list[str] = Field(default_factory=lambda: ["http", "https"])

class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)

class Rules(BaseModel):
    project: ProjectRules
    rbac: RbacRules
    slugs: SlugRules = Field(default_factory=SlugRules)
    content: ContentRules = Field(default_factory=ContentRules)
    pagination: PaginationRules = Field(default_factory=PaginationRules)
    security: SecurityRules = Field(default_factory=SecurityRules)
    ops: OpsRules = Field(default_factory=OpsRules)
