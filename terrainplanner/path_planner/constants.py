# terrainplanner/path_planner/constants.py

class PlannerConstants:
    # Goal states considered when planning to a loiter circle
    LOITER_GOAL_ANGLES: int = 10

    # Nearest-neighbour search: Euclidean candidates screened before Dubins distances are computed
    NEAREST_CANDIDATES: int = 10
    NEIGHBOUR_CANDIDATE_FACTOR: int = 2

    # Vertices screened, by straight-line distance, when a goal sample is connected directly
    GOAL_CONNECT_CANDIDATES: int = 50

    # A new vertex this close to an existing one, in position and heading, is discarded
    DUPLICATE_POSITION_TOL_M: float = 1.0
    DUPLICATE_YAW_TOL_RAD: float = 0.05

    # k-nearest RRT* / FMT* use k = K_CONSTANT * log(n), with k_rrt > e * (1 + 1/d) for d = 4
    K_CONSTANT: float = 3.5
    MIN_NEIGHBOURS: int = 5

    FMT_INITIAL_SAMPLES: int = 200
    FMT_MAX_SAMPLE_ATTEMPTS: int = 50

    # Log tree growth every this many iterations
    PROGRESS_LOG_INTERVAL: int = 500
