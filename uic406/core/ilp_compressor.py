from typing import Dict, Optional
import logging

import pulp

from uic406.core.ean import EventActivityNetwork

logger = logging.getLogger(__name__)

# Integer program over the event-activity network:
#   t_origin = 0
#   t_target - t_source >= min_duration   for every activity
#   minimize sum(t_e)
# Each event time is then pushed down to its longest-path bound, so the optimum
# equals the longest-path solution; useful as a cross-check and as the
# integer-programming compression method.


def solve_network_ilp(network: EventActivityNetwork, time_limit: Optional[int] = None) -> EventActivityNetwork:
    prob = pulp.LpProblem("uic406_compression", pulp.LpMinimize)

    t: Dict[int, pulp.LpVariable] = {
        e.index: pulp.LpVariable(f"t_{e.index}", lowBound=0, cat=pulp.LpInteger) for e in network.events
    }
    prob += t[network.origin.index] == 0

    for a in network.activities:
        prob += t[a.target] - t[a.source] >= a.min_duration, f"{a.kind.value.lower()}_{a.index}"

    prob += pulp.lpSum(t.values())

    solver = pulp.PULP_CBC_CMD(msg=False, timeLimit=time_limit) if time_limit else pulp.PULP_CBC_CMD(msg=False)
    prob.solve(solver)
    status = pulp.LpStatus[prob.status]
    if status != "Optimal":
        raise RuntimeError(f"ILP compression did not reach an optimal solution (status: {status})")

    for e in network.events:
        e.compressed_time = int(round(pulp.value(t[e.index]) or 0))
    logger.info("ILP compression solved: %d variables, %d constraints", len(t), len(network.activities) + 1)
    return network
