"""Call queue call flows.

One pass per queue::

    Entry -> [Greeting] -> More than N Active Calls? --Yes--> overflow action
                                    |No
                           Call Distribution (CQ Settings, Agents List)
                                    |
                           Call Connected? --Yes--> Call Connected
                                    |No
                           Timeout -> timeout action
"""

from __future__ import annotations

import logging
from typing import List, Optional

from teams_callflow.builders.common import FlowContext, GraphWriter, add_greeting_node, add_target, resolve_or_placeholder
from teams_callflow.builders.greetings import greeting_from_parts, truncate_filename
from teams_callflow.builders.targets import entry_node
from teams_callflow.core.config_loader import RenderOptions
from teams_callflow.graph.ids import node_id
from teams_callflow.lookup.base import EntityLookup
from teams_callflow.models.callflow import DisconnectTarget
from teams_callflow.models.graph import EdgeStyle, GraphFragment, NodeShape
from teams_callflow.models.tenant import CallQueue

logger = logging.getLogger(__name__)

SERIAL_ROUTING = "Serial"


def yes_no(value: bool) -> str:
    return "Yes" if value else "No"


class CallQueueFlowBuilder:
    def __init__(self, lookup: EntityLookup, options: Optional[RenderOptions] = None) -> None:
        self.lookup = lookup
        self.options = options or RenderOptions()

    def build(self, cq: CallQueue, graph: GraphWriter) -> None:
        ctx = FlowContext.create(self.lookup, self.options, graph)
        app = cq.as_voice_app()
        cq_id = cq.identity
        logger.info("Building call queue '%s'", cq.name)

        fragment = GraphFragment("callQueue")
        start = entry_node(app)
        fragment.add(start)
        previous = start.id

        greeting = greeting_from_parts(
            text=cq.welcome_text_to_speech_prompt,
            filename=cq.welcome_music_audio_file_name,
            download_uri=cq.welcome_music_download_uri,
        )
        greeting_node = add_greeting_node(
            ctx, fragment, node_id("cqGreeting", cq_id), "Greeting", greeting, cq_id, "cqGreeting"
        )
        if greeting_node is not None:
            fragment.edge(previous, greeting_node.id)
            previous = greeting_node.id

        overflow = fragment.node(
            node_id("cqOverflowCheck", cq_id),
            f"More than {cq.overflow_threshold}\nActive Calls?",
            NodeShape.DECISION,
        )
        fragment.edge(previous, overflow.id)
        self._queue_action(ctx, fragment, cq, "overflow", overflow.id, "Yes")

        distribution = GraphFragment(
            "cqDistribution", subgraph_id=node_id("cqDistribution", cq_id), title="Call Distribution"
        )
        agents = self._agents_fragment(ctx, cq)
        if self.options.show_queue_settings:
            settings = self._settings_fragment(cq)
            distribution.add(settings)
            distribution.add(agents)
            distribution.edge(settings.subgraph_id, agents.subgraph_id)
        else:
            distribution.add(agents)
        fragment.add(distribution)
        fragment.edge(overflow.id, distribution.subgraph_id, "No")

        connected_check = fragment.node(node_id("cqCallConnected", cq_id), "Call Connected?", NodeShape.DECISION)
        fragment.edge(agents.subgraph_id, connected_check.id)
        connected = fragment.node(node_id("cqConnected", cq_id), "Call Connected", NodeShape.TERMINAL)
        fragment.edge(connected_check.id, connected.id, "Yes")
        timeout = fragment.node(
            node_id("cqTimeout", cq_id), f"Timeout\n{cq.timeout_threshold} Seconds", NodeShape.PROCESS
        )
        fragment.edge(connected_check.id, timeout.id, "No")
        self._queue_action(ctx, fragment, cq, "timeout", timeout.id, None)

        graph.add_fragment(fragment)

    # ---- overflow / timeout -------------------------------------------------

    def _queue_action(
        self,
        ctx: FlowContext,
        fragment: GraphFragment,
        cq: CallQueue,
        kind: str,
        source_id: str,
        edge_label: Optional[str],
    ) -> None:
        if kind == "overflow":
            action = cq.overflow_action
            raw = cq.overflow_action_target
            greeting = greeting_from_parts(
                text=cq.overflow_shared_voicemail_text_to_speech_prompt,
                filename=cq.overflow_shared_voicemail_audio_file_prompt_file_name,
            )
            suppress = cq.enable_overflow_shared_voicemail_system_prompt_suppression
        else:
            action = cq.timeout_action
            raw = cq.timeout_action_target
            greeting = greeting_from_parts(
                text=cq.timeout_shared_voicemail_text_to_speech_prompt,
                filename=cq.timeout_shared_voicemail_audio_file_prompt_file_name,
            )
            suppress = cq.enable_timeout_shared_voicemail_system_prompt_suppression

        stage = "cqOverflow" if kind == "overflow" else "cqTimeout"
        target = resolve_or_placeholder(
            lambda: ctx.resolver.resolve_queue_action(action, raw, greeting, suppress),
            raw.id if raw is not None else action,
        )
        if isinstance(target, DisconnectTarget):
            add_target(ctx, fragment, source_id, target, stage, cq.identity, edge_label=edge_label)
            return

        action_node = fragment.node(
            node_id(stage + "Action", cq.identity),
            f"{kind.title()} Action\n{action}",
            NodeShape.PROCESS,
        )
        fragment.edge(source_id, action_node.id, edge_label)
        add_target(ctx, fragment, action_node.id, target, stage, cq.identity)

    # ---- distribution -------------------------------------------------------

    def _music_on_hold_label(self, cq: CallQueue) -> str:
        if cq.use_default_music_on_hold or not cq.music_on_hold_audio_file_name:
            return "Music On Hold: Default"
        if self.options.show_audio_file_names:
            name = truncate_filename(cq.music_on_hold_audio_file_name, self.options.truncate_greetings)
            return f"Music On Hold: Custom ({name})"
        return "Music On Hold: Custom"

    def _settings_fragment(self, cq: CallQueue) -> GraphFragment:
        settings = GraphFragment("cqSettings", subgraph_id=node_id("cqSettings", cq.identity), title="CQ Settings")
        lines = [
            f"Routing Method: {cq.routing_method}",
            f"Agent Alert Time: {cq.agent_alert_time} Seconds",
            self._music_on_hold_label(cq),
            f"Conference Mode: {yes_no(cq.conference_mode)}",
            f"Agent Opt Out Allowed: {yes_no(cq.allow_opt_out)}",
            f"Presence Based Routing: {yes_no(cq.presence_based_routing)}",
            f"TTS Greeting Language: {cq.language_id or 'Not Set'}",
            f"Timeout: {cq.timeout_threshold} Seconds",
        ]
        previous = None
        for index, line in enumerate(lines, 1):
            node = settings.node(node_id("cqSetting", cq.identity, index), line, NodeShape.INFO)
            if previous is not None:
                settings.edge(previous, node.id, style=EdgeStyle.INVISIBLE)
            previous = node.id
        return settings

    def agent_list_type_label(self, ctx: FlowContext, cq: CallQueue) -> str:
        """Summarise where the roster comes from: users, groups, or one team channel."""
        if cq.channel_id:
            if not cq.distribution_lists:
                logger.warning("Call queue '%s' uses channel %s without a team", cq.name, cq.channel_id)
                return f"Agent List Type: Teams Channel\nChannel: {cq.channel_id}"
            team = ctx.lookup.get_group(cq.distribution_lists[0])
            channel = ctx.lookup.get_channel(team.id, cq.channel_id)
            return f"Agent List Type: Teams Channel\nTeam: {team.display_name}\nChannel: {channel.display_name}"
        if cq.distribution_lists:
            names = [ctx.lookup.get_group(group_id).display_name for group_id in cq.distribution_lists]
            return "Agent List Type: Groups\n" + ", ".join(names)
        return "Agent List Type: Users"

    def _agents_fragment(self, ctx: FlowContext, cq: CallQueue) -> GraphFragment:
        agents = GraphFragment("cqAgents", subgraph_id=node_id("cqAgentList", cq.identity), title="Agents List")
        list_type = agents.node(
            node_id("cqAgentListType", cq.identity), self.agent_list_type_label(ctx, cq), NodeShape.INFO
        )
        if not cq.agents:
            empty = agents.node(node_id("cqNoAgents", cq.identity), "No Agents", NodeShape.INFO)
            agents.edge(list_type.id, empty.id)
            return agents

        serial = cq.routing_method == SERIAL_ROUTING
        for position, agent in enumerate(cq.agents, 1):
            user = ctx.lookup.get_user(agent.object_id)
            lines: List[str] = [user.display_name]
            if self.options.show_agent_numbers and user.phone_number:
                lines.append(f"Direct: {user.phone_number}")
            if self.options.show_agent_opt_in:
                lines.append(f"Opted In: {yes_no(agent.opt_in)}")
            node = agents.node(node_id("cqAgent", cq.identity, position), "\n".join(lines), NodeShape.PROCESS)
            agents.edge(list_type.id, node.id, str(position) if serial else None)
        return agents


__all__ = ["CallQueueFlowBuilder", "SERIAL_ROUTING"]
