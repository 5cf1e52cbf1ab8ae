"""Auto attendant call flows.

Stages per auto attendant::

    Entry -> [During Holiday?] -> [During Business Hours?] -> Default
                   |                        |
                Holidays               After Hours

The holiday check always comes first: holidays override business hours. The default and
after-hours stages share one shape and use separate node id prefixes, so the two never
share a node.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import List, Optional

from teams_callflow.builders.common import FlowContext, GraphWriter, add_greeting_node, add_target, resolve_or_placeholder
from teams_callflow.builders.greetings import greeting_from_prompt, is_configured
from teams_callflow.builders.schedules import business_hours_lines, holiday_lines, is_always_open
from teams_callflow.builders.targets import entry_node
from teams_callflow.core.config_loader import RenderOptions
from teams_callflow.errors import ConfigurationAmbiguityError
from teams_callflow.graph.ids import node_id
from teams_callflow.lookup.base import EntityLookup
from teams_callflow.models.callflow import UnresolvedTarget
from teams_callflow.models.graph import EdgeStyle, GraphFragment, NodeShape
from teams_callflow.models.tenant import AutoAttendant, CallFlow, CallHandlingAssociation, MenuOption, Schedule

logger = logging.getLogger(__name__)

ENTRY_STAGE = "autoAttendant"
DEFAULT_STAGE = "defaultCallFlow"
AFTER_HOURS_STAGE = "afterHoursCallFlow"
HOLIDAY_STAGE = "holidayCallFlow"

HOLIDAY_CHECK_LABEL = "During Holiday?"
BUSINESS_HOURS_CHECK_LABEL = "During Business Hours?"

DTMF_KEYS = {f"Tone{digit}": str(digit) for digit in range(10)}
DTMF_KEYS.update({"ToneStar": "*", "TonePound": "#"})


@dataclass(frozen=True)
class HolidayHandling:
    association: CallHandlingAssociation
    schedule: Schedule
    call_flow: CallFlow


@dataclass(frozen=True)
class AfterHoursHandling:
    schedule: Schedule
    call_flow: CallFlow


def dtmf_key(response: Optional[str]) -> Optional[str]:
    if not response or response == "Automatic":
        return None
    return DTMF_KEYS.get(response, response)


def option_label(option: MenuOption) -> Optional[str]:
    """Edge label for a menu option: the key, the voice phrases, or both."""
    key = dtmf_key(option.dtmf_response)
    phrases = ", ".join(p for p in option.voice_responses if p)
    if key and phrases:
        return f"{key} or say '{phrases}'"
    if key:
        return key
    if phrases:
        return f"say '{phrases}'"
    if option.dtmf_response == "Automatic":
        return "Automatic"
    return None


def holiday_handlings(aa: AutoAttendant) -> List[HolidayHandling]:
    """Enabled holiday associations in ascending priority, skipping broken references."""
    handlings = []
    associations = [a for a in aa.call_handling_associations if a.type == "Holiday" and a.enabled]
    for association in sorted(associations, key=lambda a: a.priority):
        schedule = aa.schedule(association.schedule_id)
        call_flow = aa.call_flow(association.call_flow_id)
        if schedule is None or call_flow is None:
            logger.warning(
                "Auto attendant '%s': holiday association %s references a missing schedule or call flow",
                aa.name, association.schedule_id,
            )
            continue
        handlings.append(HolidayHandling(association, schedule, call_flow))
    return handlings


def after_hours_handling(aa: AutoAttendant) -> Optional[AfterHoursHandling]:
    """The after-hours schedule and call flow, or None when business hours never close."""
    for association in aa.call_handling_associations:
        if association.type != "AfterHours" or not association.enabled:
            continue
        schedule = aa.schedule(association.schedule_id)
        call_flow = aa.call_flow(association.call_flow_id)
        if schedule is None or call_flow is None:
            logger.warning("Auto attendant '%s': after-hours association is incomplete", aa.name)
            return None
        try:
            if is_always_open(schedule.weekly_recurrent_schedule):
                return None
        except ConfigurationAmbiguityError as exc:
            logger.warning("Auto attendant '%s': treating unreadable business hours as always open: %s", aa.name, exc)
            return None
        return AfterHoursHandling(schedule, call_flow)
    return None


class AutoAttendantFlowBuilder:
    def __init__(self, lookup: EntityLookup, options: Optional[RenderOptions] = None) -> None:
        self.lookup = lookup
        self.options = options or RenderOptions()

    def build(self, aa: AutoAttendant, graph: GraphWriter) -> None:
        ctx = FlowContext.create(self.lookup, self.options, graph)
        app = aa.as_voice_app()
        logger.info("Building auto attendant '%s'", aa.name)

        holidays = holiday_handlings(aa)
        after_hours = after_hours_handling(aa)

        entry = GraphFragment(ENTRY_STAGE)
        start = entry_node(app)
        entry.add(start)

        holiday_fragment = None
        if holidays:
            holiday_fragment = self._holiday_fragment(ctx, aa, holidays)

        # Where the default call flow is entered from, and with which edge label.
        source, label = start.id, None
        business_hours_id = None
        if holidays:
            holiday_check = entry.node(node_id("holidayCheck", aa.identity), HOLIDAY_CHECK_LABEL, NodeShape.DECISION)
            entry.edge(start.id, holiday_check.id)
            entry.add(holiday_fragment)
            entry.edge(holiday_check.id, holiday_fragment.subgraph_id, "Yes")
            source, label = holiday_check.id, "No"
        if after_hours is not None:
            check = entry.node(
                node_id("businessHoursCheck", aa.identity),
                self._business_hours_label(aa, after_hours.schedule),
                NodeShape.DECISION,
            )
            entry.edge(source, check.id, label)
            business_hours_id = check.id
            source, label = check.id, "Yes"
        graph.add_fragment(entry)

        graph.add_fragment(
            self._call_flow_fragment(ctx, aa, aa.default_call_flow, DEFAULT_STAGE, start.id, source, label)
        )
        if after_hours is not None:
            graph.add_fragment(
                self._call_flow_fragment(
                    ctx, aa, after_hours.call_flow, AFTER_HOURS_STAGE, start.id, business_hours_id, "No"
                )
            )

    # ---- decision labels ----------------------------------------------------

    def _business_hours_label(self, aa: AutoAttendant, schedule: Schedule) -> str:
        lines = [BUSINESS_HOURS_CHECK_LABEL]
        if aa.time_zone_id:
            lines.append(f"Time Zone: {aa.time_zone_id}")
        if schedule.weekly_recurrent_schedule is not None:
            lines.extend(business_hours_lines(schedule.weekly_recurrent_schedule))
        return "\n".join(lines)

    # ---- holidays -----------------------------------------------------------

    def _holiday_fragment(self, ctx: FlowContext, aa: AutoAttendant, holidays: List[HolidayHandling]) -> GraphFragment:
        subgraph = GraphFragment(HOLIDAY_STAGE, subgraph_id=node_id("holidaySubgraph", aa.identity), title="Holidays")
        for index, holiday in enumerate(holidays, 1):
            name = holiday.schedule.name or f"Holiday {index}"
            block = GraphFragment(
                f"{HOLIDAY_STAGE}{index}",
                subgraph_id=node_id("holidayBlock", aa.identity, index),
                title=name,
            )
            schedule_node = block.node(
                node_id("holidaySchedule", aa.identity, index),
                "\n".join([f"Holiday: {name}"] + holiday_lines(holiday.schedule.fixed_schedule)),
                NodeShape.INFO,
            )
            previous = schedule_node.id
            greeting = greeting_from_prompt(holiday.call_flow.greetings[0] if holiday.call_flow.greetings else None)
            greeting_node = add_greeting_node(
                ctx, block, node_id("holidayGreeting", aa.identity, index), "Greeting",
                greeting, aa.identity, "holidayGreeting", index,
            )
            if greeting_node is not None:
                block.edge(previous, greeting_node.id)
                previous = greeting_node.id

            options = holiday.call_flow.menu.menu_options
            if not options:
                self._no_action(block, aa, "holiday", previous, None, index)
            else:
                if len(options) > 1:
                    logger.debug("Holiday '%s' has %d options, using the first", name, len(options))
                self._action(ctx, block, aa, options[0], "holiday", previous, None, index, previous)
            subgraph.add(block)
        return subgraph

    # ---- default / after hours ----------------------------------------------

    def _call_flow_fragment(
        self,
        ctx: FlowContext,
        aa: AutoAttendant,
        flow: CallFlow,
        stage: str,
        entry_id: str,
        source_id: str,
        edge_label: Optional[str],
    ) -> GraphFragment:
        fragment = GraphFragment(stage)
        previous, label = source_id, edge_label

        greeting = greeting_from_prompt(flow.greetings[0] if flow.greetings else None)
        greeting_node = add_greeting_node(
            ctx, fragment, node_id(stage + "Greeting", aa.identity), "Greeting", greeting, aa.identity, stage + "Greeting"
        )
        if greeting_node is not None:
            fragment.edge(previous, greeting_node.id, label)
            previous, label = greeting_node.id, None

        menu = flow.menu
        menu_greeting = greeting_from_prompt(menu.prompts[0] if menu.prompts else None)
        options = menu.menu_options

        if len(options) <= 1 and not is_configured(menu_greeting):
            if not options:
                self._no_action(fragment, aa, stage, previous, label)
            else:
                # An announcement replays from the greeting, or from the entry when there is none.
                loop_target = greeting_node.id if greeting_node is not None else entry_id
                self._action(ctx, fragment, aa, options[0], stage, previous, label, None, loop_target)
            return fragment

        ivr_node = add_greeting_node(
            ctx, fragment, node_id(stage + "IvrGreeting", aa.identity), "IVR Greeting",
            menu_greeting, aa.identity, stage + "IvrGreeting",
        )
        if ivr_node is not None:
            fragment.edge(previous, ivr_node.id, label)
            previous, label = ivr_node.id, None

        key_press_label = "Key Press"
        if menu.dial_by_name_enabled:
            key_press_label += "\nDial By Name Enabled"
        key_press = fragment.node(node_id(stage + "KeyPress", aa.identity), key_press_label, NodeShape.DECISION)
        fragment.edge(previous, key_press.id, label)

        loop_target = ivr_node.id if ivr_node is not None else key_press.id
        for index, option in enumerate(options, 1):
            self._action(ctx, fragment, aa, option, stage, key_press.id, option_label(option), index, loop_target)
        return fragment

    # ---- actions ------------------------------------------------------------

    def _no_action(
        self,
        fragment: GraphFragment,
        aa: AutoAttendant,
        stage: str,
        source_id: str,
        edge_label: Optional[str],
        counter: Optional[int] = None,
    ) -> None:
        node = fragment.node(node_id(stage + "NoAction", aa.identity, counter), "No Action Configured", NodeShape.INFO)
        fragment.edge(source_id, node.id, edge_label)

    def _action(
        self,
        ctx: FlowContext,
        fragment: GraphFragment,
        aa: AutoAttendant,
        option: MenuOption,
        stage: str,
        source_id: str,
        edge_label: Optional[str],
        counter: Optional[int],
        loop_target: str,
    ) -> None:
        action = option.action

        if action == "DisconnectCall":
            node = fragment.node(node_id(stage + "Disconnect", aa.identity, counter), "Disconnect Call", NodeShape.TERMINAL)
            fragment.edge(source_id, node.id, edge_label)
            return

        if action == "Announcement":
            greeting = greeting_from_prompt(option.prompt)
            announcement_id = node_id(stage + "Announcement", aa.identity, counter)
            node = add_greeting_node(
                ctx, fragment, announcement_id, "Announcement", greeting, aa.identity, stage + "Announcement", counter
            )
            if node is None:
                node = fragment.node(announcement_id, "Announcement", NodeShape.PROCESS)
            fragment.edge(source_id, node.id, edge_label)
            fragment.edge(node.id, loop_target, style=EdgeStyle.DOTTED)
            return

        if action == "TransferCallToOperator":
            action_node = fragment.node(
                node_id(stage + "Action", aa.identity, counter), "Transfer Call To\nOperator", NodeShape.PROCESS
            )
            fragment.edge(source_id, action_node.id, edge_label)
            target = resolve_or_placeholder(lambda: ctx.resolver.resolve_operator(aa), aa.operator.id if aa.operator else "")
            add_target(ctx, fragment, action_node.id, target, stage, aa.identity, counter)
            return

        if action == "TransferCallToTarget":
            action_node = fragment.node(
                node_id(stage + "Action", aa.identity, counter), "Transfer Call To\nTarget", NodeShape.PROCESS
            )
            fragment.edge(source_id, action_node.id, edge_label)
            raw = option.call_target
            if raw is None:
                target = UnresolvedTarget("", "Menu option has no call target")
            else:
                target = resolve_or_placeholder(lambda: ctx.resolver.resolve(raw), raw.id)
            add_target(ctx, fragment, action_node.id, target, stage, aa.identity, counter)
            return

        logger.warning("Auto attendant '%s': unsupported menu action %r", aa.name, action)
        node = fragment.node(
            node_id(stage + "Unsupported", aa.identity, counter), f"Unsupported Action\n{action}", NodeShape.INFO
        )
        fragment.edge(source_id, node.id, edge_label)


__all__ = [
    "AutoAttendantFlowBuilder",
    "HolidayHandling",
    "AfterHoursHandling",
    "holiday_handlings",
    "after_hours_handling",
    "option_label",
    "dtmf_key",
    "DEFAULT_STAGE",
    "AFTER_HOURS_STAGE",
    "HOLIDAY_STAGE",
]
