from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model whose wire/persisted field names are camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)

    def to_doc(self, **kwargs) -> dict:
        """Dump using the persisted (camelCase) field names."""

        return self.model_dump(by_alias=True, **kwargs)
