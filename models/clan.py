from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LegendStatistics(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    legend_trophies: int = Field(0, validation_alias="legendTrophies")


class ClashPlayer(BaseModel):
    """A clan member as returned by the official API, trimmed to the roster-relevant stats"""
    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    name: str
    tag: str
    town_hall_level: int = Field(validation_alias="townHallLevel")
    war_stars: int = Field(0, validation_alias="warStars")
    trophies: int = 0
    best_trophies: int = Field(0, validation_alias="bestTrophies")
    legend_statistics: Optional[LegendStatistics] = Field(None, validation_alias="legendStatistics")
