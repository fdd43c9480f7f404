"""
Models / base.py
Shared pydantic configuration: Python attributes stay snake_case while the
JSON seen by the frontend is camelCase (`winningRate`, `eggId`, ...).
"""
from typing import Union

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

# A prize is either an amount or a free-text promotional prize ("Free coffee").
# Strict members: JSON true must not turn into 1.
Reward = Union[StrictInt, StrictFloat, StrictStr]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
