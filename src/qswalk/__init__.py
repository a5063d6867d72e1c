from . import (
    demoralization,
    dirac,
    evolution,
    graph,
    operator,
    shared,
    vertex,
)
