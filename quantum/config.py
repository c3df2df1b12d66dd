# quantum/config.py

class Config:
    # Branch limits
    MAX_BRANCHES = 8
    MAX_QUANTUM_PIECES_PER_SIDE = 6
    MAX_PIECE_COPIES = 3
    MAX_OCCUPANTS_BEFORE_SPLIT = 2

    # Amplitude math
    NORMALIZE_EPS = 1e-12
    CANCEL_EPS = 1e-4
    INTERFERENCE_MARGIN = 0.05

    # Occupancy thresholds (aggregate probability)
    CERTAIN_PROBABILITY = 0.99
    EMPTY_PROBABILITY = 0.01

    # Entanglement detection
    POSITIVE_JACCARD = 0.85
    NEGATIVE_MIN_COVERAGE = 0.25
    NEGATIVE_MIN_COMBINED = 0.6
    MAX_ENTANGLEMENTS = 5

    # Game status
    QUANTUM_CHECK_KING_PROBABILITY = 0.8
    ELIMINATION_PROBABILITY = 0.01
