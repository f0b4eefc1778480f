from __future__ import annotations
from typing import NamedTuple


class DailyPrompt(NamedTuple):
    date: str  # YYYY-MM-DD (UTC)
    prompt_id: str
    prompt_text: str
    category: str


DAILY_PROMPTS: list[DailyPrompt] = [
    DailyPrompt("2025-05-17", "P001", "When your AI therapist starts overanalyzing your binary emotions", "Tech/AI"),
    DailyPrompt("2025-05-18", "P002", "Me trying to explain 'vibe check' to my robot coworker in 2025", "Work Life"),
    DailyPrompt("2025-05-19", "P003", "When you finally get revenge and the group chat is hyping you up", "Relatable Humor"),
    DailyPrompt("2025-05-20", "P004", "POV: You're waiting for the Nintendo Switch 2 to drop but it's sold out", "Gaming"),
    DailyPrompt("2025-05-21", "P005", "When your boss schedules a 7 AM Zoom but you're still in pajama mode", "Work Life"),
    DailyPrompt("2025-05-22", "P006", "That moment when you realize summer break is only 2 weeks away", "School Life"),
    DailyPrompt("2025-05-23", "P007", "When you accidentally say 'skibidi' in a serious meeting", "Internet Trends"),
    DailyPrompt("2025-05-24", "P008", "Me pretending I know what's happening in the latest Marvel phase", "Pop Culture"),
    DailyPrompt("2025-05-25", "P009", "When your VR workout app judges your lazy burpee form", "Tech/AI"),
    DailyPrompt("2025-05-26", "P010", "Memorial Day BBQ vibes but the AI grill keeps burning the burgers", "Seasonal"),
    DailyPrompt("2025-05-27", "P011", "When you try to flex your new AR glasses but they glitch in public", "Tech/AI"),
    DailyPrompt("2025-05-28", "P012", "POV: Your group project partner submits their part at 11:59 PM", "School Life"),
    DailyPrompt("2025-05-29", "P013", "When you see a 'low battery' warning on your smart fridge", "Relatable Humor"),
    DailyPrompt("2025-05-30", "P014", "Me refreshing X to see if the new season of Stranger Things dropped", "Pop Culture"),
    DailyPrompt("2025-05-31", "P015", "When your gaming squad finally beats the raid after 17 tries", "Gaming"),
    DailyPrompt("2025-06-01", "P016", "June 1st: Me pretending I'm ready for summer body season", "Seasonal"),
    DailyPrompt("2025-06-02", "P017", "When your AI assistant roasts your playlist in front of your crush", "Tech/AI"),
    DailyPrompt("2025-06-03", "P018", "POV: You're stuck in traffic but vibing to a 2025 TikTok banger", "Relatable Humor"),
    DailyPrompt("2025-06-04", "P019", "When you realize the meeting is optional but you already logged in", "Work Life"),
    DailyPrompt("2025-06-05", "P020", "Me trying to keep up with 2025 slang like 'Ohio energy'", "Internet Trends"),
    DailyPrompt("2025-06-06", "P021", "When you pre-order the new GTA but your Wi-Fi betrays you", "Gaming"),
    DailyPrompt("2025-06-07", "P022", "POV: Your professor assigns a 10-page paper during finals week", "School Life"),
    DailyPrompt("2025-06-08", "P023", "When you tell your AI pet it's adopted and it starts overanalyzing", "Tech/AI"),
    DailyPrompt("2025-06-09", "P024", "Me acting like I didn't cry during the new Pixar movie trailer", "Pop Culture"),
    DailyPrompt("2025-06-10", "P025", "When you're hyped for Pride Month but your outfit is giving 'meh'", "Seasonal"),
    DailyPrompt("2025-06-11", "P026", "POV: You're explaining NFTs to your grandma for the third time", "Relatable Humor"),
    DailyPrompt("2025-06-12", "P027", "When your gaming chair arrives but you still lose every match", "Gaming"),
    DailyPrompt("2025-06-13", "P028", "Friday the 13th: My superstitious self avoiding every notification", "Seasonal"),
    DailyPrompt("2025-06-14", "P029", "When you join a viral X challenge but your video gets 3 views", "Internet Trends"),
    DailyPrompt("2025-06-15", "P030", "Me pretending I'm productive on a Sunday but I'm just doomscrolling", "Relatable Humor"),
    DailyPrompt("2025-06-16", "P031", "When you try to impress your boss with AI-generated slides but they crash", "Work Life"),
    DailyPrompt("2025-06-17", "P032", "POV: You're vibing at a summer festival but your phone dies", "Seasonal"),
    DailyPrompt("2025-06-18", "P033", "When you accidentally like a 2023 X post while stalking your crush", "Relatable Humor"),
    DailyPrompt("2025-06-19", "P034", "Me waiting for the new Star Wars series but it's delayed again", "Pop Culture"),
    DailyPrompt("2025-06-20", "P035", "When your AI fitness coach calls you out for skipping leg day", "Tech/AI"),
    DailyPrompt("2025-06-21", "P036", "POV: You're rage-quitting after losing to a camper in the new CoD", "Gaming"),
    DailyPrompt("2025-06-22", "P037", "When you try to join a TikTok dance trend but your coordination says no", "Internet Trends"),
    DailyPrompt("2025-06-23", "P038", "Me acting like I'm prepared for finals but I'm just caffeinated chaos", "School Life"),
    DailyPrompt("2025-06-24", "P039", "When your smart home locks you out because it's 'updating'", "Tech/AI"),
    DailyPrompt("2025-06-25", "P040", "POV: You're at a family reunion but they're asking about your crypto investments", "Relatable Humor"),
    DailyPrompt("2025-06-26", "P041", "When you binge the new Netflix anime but now you have no sleep", "Pop Culture"),
    DailyPrompt("2025-06-27", "P042", "Me pretending I'm not hyped for the summer gaming sales", "Gaming"),
    DailyPrompt("2025-06-28", "P043", "When your AI travel planner books you a 6 AM flight for vacation", "Seasonal"),
    DailyPrompt("2025-06-29", "P044", "POV: You're explaining 'rizzler energy' to your out-of-touch manager", "Internet Trends"),
    DailyPrompt("2025-06-30", "P045", "When you realize your summer internship is unpaid but you're already committed", "Work Life"),
    DailyPrompt("2025-07-01", "P046", "Me trying to act chill when my favorite artist drops a surprise album", "Pop Culture"),
    DailyPrompt("2025-07-02", "P047", "When your VR headset dies mid-boss fight and you're screaming", "Gaming"),
    DailyPrompt("2025-07-03", "P048", "POV: You're prepping for 4th of July but the AI grill is malfunctioning", "Seasonal"),
    DailyPrompt("2025-07-04", "P049", "When your AI fireworks display glitches but the BBQ is still lit", "Seasonal"),
    DailyPrompt("2025-07-05", "P050", "When you try to flex your new drone but it crashes into a tree", "Tech/AI"),
    DailyPrompt("2025-07-06", "P051", "POV: You're stuck in a group chat planning a beach trip", "Relatable Humor"),
    DailyPrompt("2025-07-07", "P052", "When you realize the new Spider-Man movie is a multiverse reboot", "Pop Culture"),
    DailyPrompt("2025-07-08", "P053", "Me acting like I'm not addicted to the new battle royale game", "Gaming"),
    DailyPrompt("2025-07-09", "P054", "When your AI alarm clock roasts you for hitting snooze 10 times", "Tech/AI"),
    DailyPrompt("2025-07-10", "P055", "POV: You're trying to go viral on X but your meme is too niche", "Internet Trends"),
]

_BY_DATE: dict[str, DailyPrompt] = {p.date: p for p in DAILY_PROMPTS}

DEFAULT_PROMPT_DATE = "2025-05-18"
DEFAULT_PROMPT = _BY_DATE.get(DEFAULT_PROMPT_DATE) or DailyPrompt(
    DEFAULT_PROMPT_DATE, "P002", "Me trying to explain 'vibe check' to my robot coworker in 2025", "Work Life"
)


def prompt_for_date(day: str) -> DailyPrompt | None:
    return _BY_DATE.get(day)


def resolve_prompt(day: str) -> DailyPrompt:
    """Prompt scheduled for `day`, or the fixed default when the table has no entry."""
    return prompt_for_date(day) or DEFAULT_PROMPT
