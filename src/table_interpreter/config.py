# Nested evaluations (cells and sub-expressions) followed recursively before
# a chain of references is unwound and resumed from its far end. Each level
# costs about three Python frames, so this has to stay well below
# sys.getrecursionlimit(). Lower values only cost more restarts on long chains.
max_evaluation_depth = 100

# None renders numbers with the shortest text that round-trips, an int renders
# them with that many significant digits (`%.6g` style).
number_precision: int | None = None


def set_max_evaluation_depth(depth: int):
    global max_evaluation_depth
    if depth < 1:
        raise ValueError(f"Evaluation depth must be positive, got {depth}")
    max_evaluation_depth = depth


def set_number_precision(precision: int | None):
    global number_precision
    if precision is not None and precision < 1:
        raise ValueError(f"Precision must be positive, got {precision}")
    number_precision = precision
