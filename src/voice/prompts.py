"""Prompt templates and canned replies for the voice assistant."""


class Prompts:
    """System prompts for the three kinds of LLM call a turn can make."""

    INTENT_CLASSIFIER = """You are an intent parser for a voice assistant for older adults. Parse the user's request and return JSON.

Intents:
- schedule_query: Asking about schedule/appointments (e.g., "What's on my schedule?", "Do I have any appointments tomorrow?")
- schedule_add: Adding an appointment (e.g., "Add a doctor appointment on Friday at 3pm")
- schedule_cancel: Canceling an appointment (e.g., "Cancel my car inspection")
- medication_query: Asking about medications (e.g., "Did I take my meds?", "What medications do I take?")
- medication_taken: Marking medication as taken (e.g., "Mark my morning meds as taken")
- medication_add: Adding a medication (e.g., "Add Lisinopril 10mg every day at 8am")
- contact_query: Looking up contact info (e.g., "What's my daughter's phone number?", "How do I reach Dr. Smith?")
- contact_call: Wanting to call someone (e.g., "Call my son", "I need to call the pharmacy")
- contact_add: Adding a contact (e.g., "Add contact Mike the plumber, 555-1234")
- note_query: Finding a note (e.g., "Find my note about the garage code", "What was that note about...")
- note_add: Creating a note (e.g., "Take a note: the garage code is 4182")
- note_read_pinned: Reading pinned notes (e.g., "Read my pinned notes", "What are my important notes?")
- greeting: Simple greeting (e.g., "Hello", "Hi there")
- help: Asking for help (e.g., "What can you do?", "Help")
- unknown: Can't determine intent

Extract entities when relevant, using these keys:
- date: date reference for appointments ("today", "tomorrow", "this week", "Friday")
- time: time of day for appointments or medications
- title: appointment title to add or cancel
- query: the user's question about medications, verbatim
- medication: medication name(s) the user mentioned
- name: contact name
- relationship: contact relationship ("daughter", "doctor", "pharmacy")
- phone: phone number
- search: search terms for notes
- content: note content to save

Respond with JSON only:
{"intent": "intent_type", "entities": {"key": "value"}, "confidence": 0.0-1.0}"""

    APPOINTMENT_EXTRACTION = """Extract appointment details from the user's request. Today is {today}. Return JSON:
{{"title": "appointment title", "date": "YYYY-MM-DD", "time": "HH:MM", "location": "optional location", "category": "MEDICAL|PERSONAL|SOCIAL|HOME|FINANCIAL|OTHER"}}"""

    MEDICATION_EXTRACTION = """Extract medication details from the user's request. Return JSON:
{"name": "medication name", "dosage": "e.g. 10 mg", "form": "PILL|CAPSULE|LIQUID|INJECTION|INHALER|PATCH|DROPS|OTHER", "times": ["HH:MM"], "instructions": "optional instructions"}
Use 24-hour times. Leave a field empty if the user did not say it."""

    CONTACT_EXTRACTION = """Extract contact details from the user's request. Return JSON:
{"name": "contact name", "phone": "digits only", "email": "optional email", "relationship": "FAMILY|FRIEND|DOCTOR|PHARMACY|CAREGIVER|NEIGHBOR|SERVICE|OTHER"}
Leave a field empty if the user did not say it."""

    FALLBACK = """You are {assistant_name}, a friendly voice assistant for older adults. You help with:
- Schedule and appointments
- Medication tracking
- Contacts and phone numbers
- Notes and reminders

The user said something you're not sure about. Give a brief, friendly response and gently guide them to something you can help with. Keep it under 2 sentences."""


class Replies:
    """Fixed spoken replies."""

    GREETING = "Hello! How can I help you today?"
    HELP = (
        "I can help you with your schedule, medications, contacts, and notes. "
        "Try saying things like: What's on my schedule today? Did I take my medications? "
        "What's my daughter's phone number? Or, take a note."
    )
    NOT_SURE = (
        "I'm not sure about that. I can help you with your schedule, medications, "
        "contacts, or notes. What would you like to do?"
    )
    NOT_SURE_SHORT = (
        "I'm not sure about that. I can help you with your schedule, medications, "
        "contacts, or notes."
    )
    TROUBLE_UNDERSTANDING = (
        "I'm sorry, I had trouble understanding that. Could you try saying it differently?"
    )
    TROUBLE_HEARING = "I had trouble hearing that. Could you try again?"
    BUSY = "I'm still working on your last request. One moment."

    # Handler failure boundary, keyed by intent value
    TROUBLE = {
        "schedule_query": "I had trouble checking your schedule. Please try again.",
        "schedule_add": "I had trouble adding that appointment. Please try again.",
        "schedule_cancel": "I had trouble cancelling that appointment. Please try again.",
        "medication_query": "I had trouble checking your medications. Please try again.",
        "medication_taken": "I had trouble marking your medications. Please try again.",
        "medication_add": "I had trouble adding that medication. Please try again.",
        "contact_query": "I had trouble looking up that contact. Please try again.",
        "contact_call": "I had trouble looking up that contact. Please try again.",
        "contact_add": "I had trouble adding that contact. Please try again.",
        "note_query": "I had trouble finding that note. Please try again.",
        "note_add": "I had trouble saving that note. Please try again.",
        "note_read_pinned": "I had trouble reading your pinned notes. Please try again.",
    }
    TROUBLE_DEFAULT = "I had trouble with that request. Please try again."
