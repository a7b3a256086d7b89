from __future__ import annotations

from datetime import datetime, timedelta

CLASSIFICATION_SYSTEM = "You are a productivity assistant that classifies user input."

CLASSIFICATION_PROMPT = """
You are an assistant for a productivity app. Analyze the user input and classify it as one of the following:

- CALENDAR: Time-specific activities, meetings, appointments, scheduled tasks, events with dates/times, or anything that should go on a calendar
- TOUCH: Unclear, vague, incomplete thoughts, ideas that need more thinking, or tasks without specific timing

Examples:
- "Buy groceries tomorrow" → CALENDAR
- "Meeting at 3pm" → CALENDAR
- "Call mom at 5pm today" → CALENDAR
- "Dentist appointment next Friday 2-3pm" → CALENDAR
- "Lunch break 12:30 to 1:30" → CALENDAR
- "Conference call Monday 9am for 2 hours" → CALENDAR
- "Remember something" → TOUCH
- "Project ideas to think about" → TOUCH
- "Something important" → TOUCH
- "Need to plan vacation" → TOUCH
- "Random thought about work" → TOUCH

User input: "{text}"

Respond with exactly one word: CALENDAR or TOUCH
""".strip()

CLASSIFICATION_MAX_TOKENS = 10

EXTRACTION_PROMPT = """
Parse this text into a detailed calendar event. Today is {weekday}, {today} at {now_time}.

Text: "{text}"

Extract and format as JSON:
{{
    "title": "Event title (required)",
    "startDate": "YYYY-MM-DD",
    "startTime": "HH:MM (24hr format)",
    "endDate": "YYYY-MM-DD",
    "endTime": "HH:MM (24hr format)",
    "duration": 60,
    "isAllDay": false,
    "category": "Work|Personal|Health|Social|Travel|General",
    "description": "Additional details or null",
    "confidence": 0.9
}}

Rules for parsing:
1. DATES:
   - No date specified → use today
   - "tomorrow" → use tomorrow's date
   - "next [day]" → calculate that date from today
   - "Friday", "Monday" etc → next occurrence of that weekday (never today)
   - "next week" → 7 days from today

2. TIMES & DURATION:
   - No time specified → default to 2 hours starting at next reasonable time
   - "morning" → 09:00, "afternoon" → 14:00, "evening" → 18:00, "night" → 20:00
   - "lunch" → 12:00-13:00, "dinner" → 18:00-19:30
   - "all day" → set isAllDay: true
   - Extract duration from phrases like "2 hour meeting", "30 minute call"
   - Default duration: meetings=60min, calls=30min, meals=60-90min, appointments=60min

3. CATEGORIES:
   - "meeting", "conference", "presentation" → Work
   - "doctor", "gym", "workout", "medical" → Health
   - "dinner", "lunch", "party", "friends" → Social
   - "family", "personal", "shopping", "errands" → Personal
   - Everything else → General

4. CONFIDENCE:
   - 0.9 = very clear time/date/duration
   - 0.7 = some details clear, some assumed
   - 0.5 = mostly assumed/guessed

Examples:
"Team meeting tomorrow 2-4pm" →
{{
    "title": "Team meeting",
    "startDate": "{tomorrow}",
    "startTime": "14:00",
    "endDate": "{tomorrow}",
    "endTime": "16:00",
    "duration": 120,
    "isAllDay": false,
    "category": "Work",
    "description": null,
    "confidence": 0.9
}}

"Lunch with Sarah" →
{{
    "title": "Lunch with Sarah",
    "startDate": "{today}",
    "startTime": "12:00",
    "endDate": "{today}",
    "endTime": "13:00",
    "duration": 60,
    "isAllDay": false,
    "category": "Social",
    "description": null,
    "confidence": 0.7
}}

"All day conference Friday" →
{{
    "title": "Conference",
    "startDate": "next Friday's date",
    "startTime": "09:00",
    "endDate": "next Friday's date",
    "endTime": "17:00",
    "duration": 480,
    "isAllDay": true,
    "category": "Work",
    "description": null,
    "confidence": 0.8
}}

Return only valid JSON, no other text.
""".strip()

EXTRACTION_MAX_TOKENS = 300


def classification_prompt(text: str) -> str:
    return CLASSIFICATION_PROMPT.format(text=text)


def extraction_prompt(text: str, now: datetime) -> str:
    return EXTRACTION_PROMPT.format(
        text=text,
        weekday=now.strftime("%A"),
        today=now.strftime("%Y-%m-%d"),
        tomorrow=(now + timedelta(days=1)).strftime("%Y-%m-%d"),
        now_time=now.strftime("%H:%M"),
    )
