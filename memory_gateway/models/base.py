"""
base.py — Shared pydantic base for wire models.

The browser client speaks camelCase (videoId, channelTitle, ...); Python
code keeps snake_case attributes. Models accept either spelling on input
and serialise by alias.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
