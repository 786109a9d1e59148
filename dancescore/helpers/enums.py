import enum


class PoseVariant(enum.Enum):
    TWO_D = '2d'
    THREE_D = '3d'


class ScoreTier(enum.Enum):
    GREAT = 'GREAT'
    GOOD = 'GOOD'
    OKAY = 'OKAY'
    BAD = 'BAD'
    POOR = 'POOR'
