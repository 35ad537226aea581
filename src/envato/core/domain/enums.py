from __future__ import annotations

from enum import Enum


class MarketName(str, Enum):
    THEMEFOREST = "themeforest"
    CODECANYON = "codecanyon"
    VIDEOHIVE = "videohive"
    AUDIOJUNGLE = "audiojungle"
    GRAPHICRIVER = "graphicriver"
    PHOTODUNE = "photodune"
    THREEDOCEAN = "3docean"

    @property
    def domain(self) -> "MarketDomain":
        return MarketDomain(f"{self.value}.net")


class MarketDomain(str, Enum):
    THEMEFOREST = "themeforest.net"
    CODECANYON = "codecanyon.net"
    VIDEOHIVE = "videohive.net"
    AUDIOJUNGLE = "audiojungle.net"
    GRAPHICRIVER = "graphicriver.net"
    PHOTODUNE = "photodune.net"
    THREEDOCEAN = "3docean.net"


class QueueEvent(str, Enum):
    RATELIMIT = "ratelimit"
    RESUME = "resume"
