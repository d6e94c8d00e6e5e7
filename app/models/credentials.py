import pydantic
from typing import List
from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

ANONYMOUS_CLIENT_ID = "anonymous"

class Credentials(pydantic.BaseModel):
    """
    What a caller is allowed to do: the client it authenticated as
    and the scopes it holds. Decoded from the bearer token.
    """
    client_id: str
    scopes: List[str] = Field(default_factory=list)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @property
    def is_anonymous(self) -> bool:
        return self.client_id == ANONYMOUS_CLIENT_ID

def anonymous() -> Credentials:
    """Credentials for a request without an Authorization header."""
    return Credentials(client_id=ANONYMOUS_CLIENT_ID, scopes=[])
