import unittest

from teams_callflow.builders.targets import TargetResolver, normalize_pstn, target_label
from teams_callflow.errors import NotFoundError, ResolutionError
from teams_callflow.graph.accumulator import GraphAccumulator
from teams_callflow.models.callflow import (
    DisconnectTarget,
    ExternalPstnTarget,
    NestedVoiceAppTarget,
    OperatorTarget,
    SharedVoicemailTarget,
    TextToSpeechGreeting,
    UserTarget,
    UserVoicemailTarget,
)
from teams_callflow.models.graph import NodeShape
from teams_callflow.models.tenant import RawCallTarget
from teams_callflow.tests.fixtures import auto_attendant, call_queue, lookup, option, target


def _raw(target_id, kind, suppress=False):
    return RawCallTarget.model_validate(target(target_id, kind, suppress))


class TargetResolverTests(unittest.TestCase):
    def setUp(self) -> None:
        self.lookup = lookup(
            [auto_attendant("aa-main", "Main Line", [option("DisconnectCall")],
                            ApplicationInstances=["ra-main"], Operator=target("u-alice", "User"))],
            [call_queue("cq-sales", "Sales", ["u-alice"], ApplicationInstances=["ra-sales"])],
        )
        self.worklist = GraphAccumulator()
        self.resolver = TargetResolver(self.lookup, self.worklist)

    def test_user_target(self) -> None:
        self.assertEqual(self.resolver.resolve(_raw("u-bob", "User")), UserTarget("u-bob", "Bob"))

    def test_missing_user_is_not_found(self) -> None:
        with self.assertRaises(NotFoundError):
            self.resolver.resolve(_raw("u-nobody", "User"))

    def test_external_number_is_normalized(self) -> None:
        self.assertEqual(self.resolver.resolve(_raw("tel:15551234", "ExternalPstn")), ExternalPstnTarget("+15551234"))
        self.assertEqual(normalize_pstn("tel:+1 555 1234"), "+15551234")

    def test_shared_voicemail_keeps_suppression_flag(self) -> None:
        resolved = self.resolver.resolve(_raw("g-support", "SharedVoicemail", suppress=True))
        self.assertIsInstance(resolved, SharedVoicemailTarget)
        self.assertTrue(resolved.suppress_system_greeting)

    def test_application_endpoint_enqueues_owner(self) -> None:
        resolved = self.resolver.resolve(_raw("ra-sales", "ApplicationEndpoint"))
        self.assertIsInstance(resolved, NestedVoiceAppTarget)
        self.assertEqual(resolved.app.identity, "cq-sales")
        self.assertEqual(self.worklist.pending, ["cq-sales"])

        self.resolver.resolve(_raw("ra-sales", "ApplicationEndpoint"))
        self.assertEqual(self.worklist.pending, ["cq-sales"])

    def test_unowned_application_endpoint_is_resolution_error(self) -> None:
        with self.assertRaises(ResolutionError):
            self.resolver.resolve(_raw("ra-ghost", "ApplicationEndpoint"))

    def test_configuration_endpoint_resolves_by_identity(self) -> None:
        resolved = self.resolver.resolve(_raw("aa-main", "ConfigurationEndpoint"))
        self.assertEqual(resolved.app.name, "Main Line")

    def test_operator_wraps_inner_target(self) -> None:
        aa = self.lookup.get_auto_attendant("aa-main")
        resolved = self.resolver.resolve_operator(aa)
        self.assertIsInstance(resolved, OperatorTarget)
        self.assertEqual(target_label(resolved), "Operator\nUser\nAlice")

    def test_operator_missing_is_resolution_error(self) -> None:
        aa = self.lookup.get_auto_attendant("aa-main").model_copy(update={"operator": None})
        with self.assertRaises(ResolutionError):
            self.resolver.resolve_operator(aa)

    def test_queue_actions(self) -> None:
        greeting = TextToSpeechGreeting("Leave a message")
        self.assertEqual(self.resolver.resolve_queue_action("DisconnectWithBusy", None, greeting, False),
                         DisconnectTarget())
        self.assertEqual(self.resolver.resolve_queue_action("Voicemail", _raw("u-bob", "User"), greeting, False),
                         UserVoicemailTarget("u-bob", "Bob"))
        shared = self.resolver.resolve_queue_action("SharedVoicemail", _raw("g-support", "SharedVoicemail"),
                                                    greeting, False)
        self.assertEqual(shared.greeting, greeting)
        with self.assertRaises(ResolutionError):
            self.resolver.resolve_queue_action("Forward", None, greeting, False)


class TargetNodeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.resolver = TargetResolver(lookup(), GraphAccumulator())

    def test_position_scoped_ids(self) -> None:
        node = self.resolver.node_for(UserTarget("u-bob", "Bob"), "defaultCallFlow", "aa1", 2)
        self.assertEqual(node.id, "defaultCallFlowTarget_aa1_2")
        self.assertEqual(node.shape, NodeShape.TERMINAL)

    def test_disconnect_node(self) -> None:
        node = self.resolver.node_for(DisconnectTarget(), "cqTimeout", "cq1")
        self.assertEqual(node.id, "cqTimeoutDisconnect_cq1")
        self.assertEqual(node.label, "Disconnect Call")


if __name__ == "__main__":
    unittest.main()
