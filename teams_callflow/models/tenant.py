"""Tenant voice-routing records.

Field names follow the PascalCase keys emitted by ``Get-CsAutoAttendant`` and
``Get-CsCallQueue`` piped through ``ConvertTo-Json`` (enums exported as strings), so a
raw snapshot validates without any key mangling.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal

from teams_callflow.models.callflow import VoiceApp, VoiceAppKind

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class TenantModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, extra="ignore", frozen=True)


class AudioFilePrompt(TenantModel):
    id: Optional[str] = None
    file_name: Optional[str] = None
    download_uri: Optional[str] = None


class Prompt(TenantModel):
    active_type: str = "None"
    text_to_speech_prompt: Optional[str] = None
    audio_file_prompt: Optional[AudioFilePrompt] = None


class RawCallTarget(TenantModel):
    id: str
    type: str
    enable_transcription: bool = False
    enable_shared_voicemail_system_prompt_suppression: bool = False


class MenuOption(TenantModel):
    action: str
    dtmf_response: Optional[str] = None
    voice_responses: List[str] = Field(default_factory=list)
    call_target: Optional[RawCallTarget] = None
    prompt: Optional[Prompt] = None


class Menu(TenantModel):
    name: Optional[str] = None
    menu_options: List[MenuOption] = Field(default_factory=list)
    prompts: List[Prompt] = Field(default_factory=list)
    dial_by_name_enabled: bool = False


class CallFlow(TenantModel):
    id: Optional[str] = None
    name: Optional[str] = None
    greetings: List[Prompt] = Field(default_factory=list)
    menu: Menu = Field(default_factory=Menu)


class TimeRange(TenantModel):
    start: str
    end: str


class WeeklyRecurrentSchedule(TenantModel):
    monday_hours: List[TimeRange] = Field(default_factory=list)
    tuesday_hours: List[TimeRange] = Field(default_factory=list)
    wednesday_hours: List[TimeRange] = Field(default_factory=list)
    thursday_hours: List[TimeRange] = Field(default_factory=list)
    friday_hours: List[TimeRange] = Field(default_factory=list)
    saturday_hours: List[TimeRange] = Field(default_factory=list)
    sunday_hours: List[TimeRange] = Field(default_factory=list)
    complement_enabled: bool = False

    def hours_for(self, day: str) -> List[TimeRange]:
        return getattr(self, f"{day.lower()}_hours")


class FixedSchedule(TenantModel):
    date_time_ranges: List[TimeRange] = Field(default_factory=list)


class Schedule(TenantModel):
    id: str
    name: Optional[str] = None
    type: Optional[str] = None
    weekly_recurrent_schedule: Optional[WeeklyRecurrentSchedule] = None
    fixed_schedule: Optional[FixedSchedule] = None


class CallHandlingAssociation(TenantModel):
    type: str
    schedule_id: str
    call_flow_id: str
    priority: int = 0
    enabled: bool = True


class AutoAttendant(TenantModel):
    identity: str
    name: str
    language_id: Optional[str] = None
    time_zone_id: Optional[str] = None
    voice_response_enabled: bool = False
    default_call_flow: CallFlow = Field(default_factory=CallFlow)
    call_flows: List[CallFlow] = Field(default_factory=list)
    schedules: List[Schedule] = Field(default_factory=list)
    call_handling_associations: List[CallHandlingAssociation] = Field(default_factory=list)
    operator: Optional[RawCallTarget] = None
    application_instances: List[str] = Field(default_factory=list)
    phone_numbers: List[str] = Field(default_factory=list)

    def call_flow(self, call_flow_id: str) -> Optional[CallFlow]:
        for flow in self.call_flows:
            if flow.id == call_flow_id:
                return flow
        return None

    def schedule(self, schedule_id: str) -> Optional[Schedule]:
        for schedule in self.schedules:
            if schedule.id == schedule_id:
                return schedule
        return None

    def as_voice_app(self) -> VoiceApp:
        return VoiceApp(
            identity=self.identity,
            name=self.name,
            kind=VoiceAppKind.AUTO_ATTENDANT,
            phone_numbers=tuple(self.phone_numbers),
        )


class Agent(TenantModel):
    object_id: str
    opt_in: bool = True


class CallQueue(TenantModel):
    identity: str
    name: str
    routing_method: str = "Attendant"
    agent_alert_time: int = 30
    allow_opt_out: bool = True
    conference_mode: bool = False
    presence_based_routing: bool = False
    use_default_music_on_hold: bool = True
    music_on_hold_audio_file_name: Optional[str] = None
    welcome_music_audio_file_name: Optional[str] = None
    welcome_music_download_uri: Optional[str] = None
    welcome_text_to_speech_prompt: Optional[str] = None
    language_id: Optional[str] = None
    overflow_threshold: int = 50
    overflow_action: str = "DisconnectWithBusy"
    overflow_action_target: Optional[RawCallTarget] = None
    overflow_shared_voicemail_text_to_speech_prompt: Optional[str] = None
    overflow_shared_voicemail_audio_file_prompt_file_name: Optional[str] = None
    enable_overflow_shared_voicemail_system_prompt_suppression: bool = False
    timeout_threshold: int = 1200
    timeout_action: str = "Disconnect"
    timeout_action_target: Optional[RawCallTarget] = None
    timeout_shared_voicemail_text_to_speech_prompt: Optional[str] = None
    timeout_shared_voicemail_audio_file_prompt_file_name: Optional[str] = None
    enable_timeout_shared_voicemail_system_prompt_suppression: bool = False
    agents: List[Agent] = Field(default_factory=list)
    distribution_lists: List[str] = Field(default_factory=list)
    channel_id: Optional[str] = None
    application_instances: List[str] = Field(default_factory=list)
    phone_numbers: List[str] = Field(default_factory=list)

    def as_voice_app(self) -> VoiceApp:
        return VoiceApp(
            identity=self.identity,
            name=self.name,
            kind=VoiceAppKind.CALL_QUEUE,
            phone_numbers=tuple(self.phone_numbers),
        )


class DirectoryUser(TenantModel):
    id: str
    display_name: str
    phone_number: Optional[str] = None


class DirectoryGroup(TenantModel):
    id: str
    display_name: str


class TeamChannel(TenantModel):
    team_id: str
    id: str
    display_name: str


class TenantSnapshot(TenantModel):
    auto_attendants: List[AutoAttendant] = Field(default_factory=list)
    call_queues: List[CallQueue] = Field(default_factory=list)
    users: List[DirectoryUser] = Field(default_factory=list)
    groups: List[DirectoryGroup] = Field(default_factory=list)
    channels: List[TeamChannel] = Field(default_factory=list)
