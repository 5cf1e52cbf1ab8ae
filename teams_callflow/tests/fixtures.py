"""Snapshot payload builders shared by the test modules.

Payloads use the same PascalCase keys as ``ConvertTo-Json`` output.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from teams_callflow.lookup.snapshot import SnapshotLookup

ALWAYS_OPEN = [{"Start": "00:00:00", "End": "1.00:00:00"}]
NINE_TO_FIVE = [{"Start": "09:00:00", "End": "17:00:00"}]


def tts(text: str) -> Dict[str, Any]:
    return {"ActiveType": "TextToSpeech", "TextToSpeechPrompt": text}


def audio(filename: str, uri: Optional[str] = None) -> Dict[str, Any]:
    return {"ActiveType": "AudioFile", "AudioFilePrompt": {"Id": "a1", "FileName": filename, "DownloadUri": uri}}


def target(target_id: str, kind: str, suppress: bool = False) -> Dict[str, Any]:
    return {"Id": target_id, "Type": kind, "EnableSharedVoicemailSystemPromptSuppression": suppress}


def option(action: str, tone: Optional[str] = "Automatic", call_target: Optional[Dict[str, Any]] = None,
           prompt: Optional[Dict[str, Any]] = None, voice: Optional[List[str]] = None) -> Dict[str, Any]:
    value: Dict[str, Any] = {"Action": action, "DtmfResponse": tone, "VoiceResponses": voice or []}
    if call_target is not None:
        value["CallTarget"] = call_target
    if prompt is not None:
        value["Prompt"] = prompt
    return value


def call_flow(flow_id: str, options: List[Dict[str, Any]], greeting: Optional[Dict[str, Any]] = None,
              menu_prompt: Optional[Dict[str, Any]] = None, dial_by_name: bool = False) -> Dict[str, Any]:
    return {
        "Id": flow_id,
        "Name": flow_id,
        "Greetings": [greeting] if greeting else [],
        "Menu": {
            "Name": flow_id + " menu",
            "MenuOptions": options,
            "Prompts": [menu_prompt] if menu_prompt else [],
            "DialByNameEnabled": dial_by_name,
        },
    }


def weekly_schedule(schedule_id: str, hours: Optional[Dict[str, List[Dict[str, str]]]] = None,
                    complement: bool = False) -> Dict[str, Any]:
    weekly: Dict[str, Any] = {f"{day}Hours": [] for day in
                              ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")}
    weekly.update(hours or {})
    weekly["ComplementEnabled"] = complement
    return {"Id": schedule_id, "Name": "Business Hours", "Type": "WeeklyRecurrence", "WeeklyRecurrentSchedule": weekly}


def weekday_schedule(schedule_id: str) -> Dict[str, Any]:
    return weekly_schedule(schedule_id, {f"{day}Hours": NINE_TO_FIVE
                                         for day in ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")})


def holiday_schedule(schedule_id: str, name: str, start: str, end: str) -> Dict[str, Any]:
    return {
        "Id": schedule_id,
        "Name": name,
        "Type": "Fixed",
        "FixedSchedule": {"DateTimeRanges": [{"Start": start, "End": end}]},
    }


def auto_attendant(identity: str, name: str, default_options: List[Dict[str, Any]],
                   **extra: Any) -> Dict[str, Any]:
    value: Dict[str, Any] = {
        "Identity": identity,
        "Name": name,
        "LanguageId": "en-US",
        "TimeZoneId": "Eastern Standard Time",
        "DefaultCallFlow": call_flow("default", default_options, extra.pop("greeting", None),
                                     extra.pop("menu_prompt", None), extra.pop("dial_by_name", False)),
        "CallFlows": [],
        "Schedules": [],
        "CallHandlingAssociations": [],
        "ApplicationInstances": [],
        "PhoneNumbers": [],
    }
    value.update(extra)
    return value


def call_queue(identity: str, name: str, agents: List[str], **extra: Any) -> Dict[str, Any]:
    value: Dict[str, Any] = {
        "Identity": identity,
        "Name": name,
        "RoutingMethod": "Attendant",
        "AgentAlertTime": 30,
        "OverflowThreshold": 50,
        "OverflowAction": "DisconnectWithBusy",
        "TimeoutThreshold": 120,
        "TimeoutAction": "Disconnect",
        "Agents": [{"ObjectId": agent, "OptIn": True} for agent in agents],
        "ApplicationInstances": [],
        "PhoneNumbers": [],
    }
    value.update(extra)
    return value


USERS = [
    {"Id": "u-alice", "DisplayName": "Alice", "PhoneNumber": "+15550001"},
    {"Id": "u-bob", "DisplayName": "Bob", "PhoneNumber": "+15550002"},
    {"Id": "u-carol", "DisplayName": "Carol"},
]

GROUPS = [
    {"Id": "g-support", "DisplayName": "Support Voicemail"},
    {"Id": "g-team", "DisplayName": "Help Desk Team"},
]

CHANNELS = [{"TeamId": "g-team", "Id": "c-general", "DisplayName": "General"}]


def snapshot(auto_attendants: Optional[List[Dict[str, Any]]] = None,
             call_queues: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    return {
        "AutoAttendants": auto_attendants or [],
        "CallQueues": call_queues or [],
        "Users": USERS,
        "Groups": GROUPS,
        "Channels": CHANNELS,
    }


def lookup(auto_attendants: Optional[List[Dict[str, Any]]] = None,
           call_queues: Optional[List[Dict[str, Any]]] = None) -> SnapshotLookup:
    return SnapshotLookup.from_dict(snapshot(auto_attendants, call_queues))
