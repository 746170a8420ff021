from __future__ import annotations

import pytest

from conftest import PUSH_UP
from musclepath.core.errors import InvalidTransitionError
from musclepath.core.models import NodeState
from musclepath.progression import ProgressionGraph, Ready
from musclepath.workout import CompletionEvent, FeedbackLevel, SessionController, SessionPhase


def test_select_workout_feedback_complete_unlocks_next(three_node_sections, clock):
    graph = ProgressionGraph.build(three_node_sections)
    assert [node.state for node in graph.nodes()] == [NodeState.AVAILABLE, NodeState.LOCKED, NodeState.LOCKED]

    result = graph.select(1)
    assert result == Ready(node_id=1, exercise=PUSH_UP)

    controller = SessionController(result.exercise, 5.0, 50, clock=clock)
    controller.start()
    t0 = clock.now
    assert controller.tick(t0) is None
    assert controller.phase is SessionPhase.RUNNING

    events = [controller.tick(t0 + 5.0), controller.tick(t0 + 6.0)]
    assert events == [CompletionEvent(xp_delta=50), None]
    assert controller.phase is SessionPhase.FINISHED

    controller.record_feedback(FeedbackLevel.NORMAL)
    assert controller.phase is SessionPhase.FEEDBACK_GIVEN

    graph.mark_completed(1, 1)
    assert graph.node_at(1).state is NodeState.COMPLETED
    assert graph.node_at(1).stars == 1
    assert graph.node_at(2).state is NodeState.AVAILABLE
    assert graph.node_at(3).state is NodeState.LOCKED


def test_cancel_mid_workout_yields_no_reward(three_node_sections, clock):
    graph = ProgressionGraph.build(three_node_sections)
    result = graph.select(1)
    controller = SessionController(result.exercise, 5.0, 50, clock=clock)
    controller.start()
    clock.advance(2.0)
    assert controller.tick() is None

    controller.cancel()
    assert controller.phase is SessionPhase.CANCELED

    clock.advance(10.0)
    with pytest.raises(InvalidTransitionError):
        controller.tick()
    assert graph.node_at(1).state is NodeState.AVAILABLE
