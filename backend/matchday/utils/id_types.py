from typing import NewType

CompetitionId = NewType("CompetitionId", int)
FixtureId = NewType("FixtureId", int)
PlayerId = NewType("PlayerId", int)
TeamId = NewType("TeamId", int)
UserId = NewType("UserId", int)
