"""Skill generator.

Converts systems from the system spec into skill definitions: a SKILL.md
body plus the config the skill runner needs (inputs, output, integrations,
triggers, permissions). Build-material answers and a few skills every
agency needs are added on top.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional

from backend.engine.text import BULLETED_LIST_DELIMITERS, parse_text_list, slugify, truncate
from backend.models.answers import AuditResponse
from backend.models.enums import SkillCategory, SystemCategory, SystemType
from backend.models.serialize import to_camel_dict
from backend.models.system_spec import System, SystemSpecOutput

SKILLABLE_TYPES = (SystemType.AGENT, SystemType.TEMPLATE, SystemType.CHECKLIST, SystemType.AUTOMATION)
PLACEHOLDER_INPUTS = ("To be determined", "To be determined in discovery")
SKILL_VERSION = "1.0"

_CATEGORY_MAP: dict[SystemCategory, SkillCategory] = {
    SystemCategory.DELIVERY: SkillCategory.DELIVERY,
    SystemCategory.SALES: SkillCategory.SALES,
    SystemCategory.OPERATIONS: SkillCategory.OPERATIONS,
    SystemCategory.CLIENT_COMMS: SkillCategory.COMMUNICATION,
    SystemCategory.QUALITY: SkillCategory.QA,
    SystemCategory.ONBOARDING: SkillCategory.OPERATIONS,
    SystemCategory.REPORTING: SkillCategory.OPERATIONS,
}


@dataclass(frozen=True)
class SkillInput:
    name: str
    label: str
    type: str
    required: bool
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    options: Optional[list[str]] = None
    source: Optional[str] = None


@dataclass(frozen=True)
class SkillOutput:
    type: str = "text"
    format: str = "markdown"
    destination: str = "display"


@dataclass(frozen=True)
class SkillTriggers:
    keywords: list[str]
    schedule: Optional[str] = None
    event: Optional[str] = None


@dataclass(frozen=True)
class SkillPermissions:
    read: list[str] = field(default_factory=list)
    write: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SkillConfig:
    name: str
    slug: str
    description: str
    category: SkillCategory
    inputs: list[SkillInput]
    output: SkillOutput
    integrations: list[str]
    triggers: SkillTriggers
    permissions: SkillPermissions = field(default_factory=SkillPermissions)
    version: str = SKILL_VERSION


@dataclass(frozen=True)
class GeneratedSkill:
    slug: str
    skill_md: str
    config_json: SkillConfig
    example_input: Optional[dict[str, Any]] = None
    example_output: Optional[str] = None
    source_system: Optional[str] = None


@dataclass(frozen=True)
class SkillSummary:
    total_skills: int
    by_category: dict[str, int]
    integrations_covered: list[str]


@dataclass(frozen=True)
class SkillCatalog:
    client_name: str
    skills: list[GeneratedSkill]
    summary: SkillSummary
    generated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return to_camel_dict(self)


@dataclass(frozen=True)
class SkillDoc:
    """Sections of a SKILL.md file."""

    name: str
    purpose: str
    when_to_use: list[str]
    inputs: list[str]
    process: list[str]
    outputs: list[str]
    quality_criteria: list[str]
    constraints: list[str]
    quality_checklist: bool = False
    extra_sections: list[tuple[str, list[str]]] = field(default_factory=list)


def render_skill_md(doc: SkillDoc) -> str:
    lines = [f"# {doc.name}", "", "## Purpose", doc.purpose, "", "## When to Use"]
    lines.extend(f"- {item}" for item in doc.when_to_use)
    lines.extend(["", "## Instructions", "", "### Input"])
    lines.extend(f"- {item}" for item in doc.inputs)
    lines.extend(["", "### Process"])
    lines.extend(f"{idx}. {step}" for idx, step in enumerate(doc.process, start=1))
    lines.extend(["", "### Output"])
    lines.extend(f"- {item}" for item in doc.outputs)
    lines.extend(["", "## Quality Criteria"])
    if doc.quality_checklist:
        lines.append("")
    marker = "- [ ] " if doc.quality_checklist else "- "
    lines.extend(f"{marker}{item}" for item in doc.quality_criteria)
    for title, items in doc.extra_sections:
        lines.extend(["", f"## {title}", ""])
        lines.extend(items)
    lines.extend(["", "## Constraints"])
    lines.extend(f"- {item}" for item in doc.constraints)
    lines.append("")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# System -> skill
# ---------------------------------------------------------------------------

def infer_input_type(label: str) -> str:
    lowered = label.lower()
    if any(k in lowered for k in ("date", "deadline", "timeline")):
        return "date"
    if any(k in lowered for k in ("type", "category", "status")):
        return "select"
    if any(k in lowered for k in ("description", "details", "notes", "brief", "context")):
        return "textarea"
    if any(k in lowered for k in ("number", "count", "amount")):
        return "number"
    return "text"


def inputs_from_prd(system: System) -> list[SkillInput]:
    """One input per PRD input; the first two are required."""
    inputs = [
        SkillInput(
            name=slugify(label),
            label=label,
            type=infer_input_type(label),
            required=idx < 2,
            placeholder=f"Enter {label.lower()}...",
        )
        for idx, label in enumerate(system.prd.inputs)
        if label not in PLACEHOLDER_INPUTS
    ]
    return inputs or [
        SkillInput(name="input", label="Input", type="textarea", required=True,
                   placeholder="Enter information..."),
    ]


def infer_output(system: System) -> SkillOutput:
    outputs = " ".join(system.prd.outputs).lower()
    if "email" in outputs or system.category == SystemCategory.CLIENT_COMMS:
        return SkillOutput(type="email", format="plain")
    if system.type == SystemType.CHECKLIST or "checklist" in outputs:
        return SkillOutput(type="document")
    if "slack" in outputs or "message" in outputs:
        return SkillOutput(type="slack_message", format="plain", destination="slack")
    if "task" in outputs or "project" in outputs:
        return SkillOutput(type="task")
    return SkillOutput()


def extract_keywords(system: System) -> list[str]:
    words: list[str] = []
    candidates = system.name.lower().split() + system.description.lower().split()[:5]
    for word in candidates:
        if len(word) > 3 and word not in words:
            words.append(word)
    return words[:5]


def _usable_integrations(system: System) -> list[str]:
    return [i for i in system.integrations if i and i != "None"]


def example_input(config: SkillConfig, example_date: str = "YYYY-MM-DD") -> dict[str, Any]:
    example: dict[str, Any] = {}
    for item in config.inputs:
        if item.type == "textarea":
            example[item.name] = f"Example content for {item.label}..."
        elif item.type == "select":
            example[item.name] = item.options[0] if item.options else "Option 1"
        elif item.type == "number":
            example[item.name] = 5
        elif item.type == "date":
            example[item.name] = example_date
        else:
            example[item.name] = f"Example {item.label}"
    return example


def example_output(system: System) -> str:
    outputs = "\n".join(f"- {o}" for o in system.prd.outputs)
    return (
        f"[Example output for {system.name}]\n\n"
        "Based on the inputs provided, here is the generated output...\n\n"
        f"{outputs}\n"
    )


def system_skill_md(system: System) -> str:
    constraints = ["Follow the process exactly", "Escalate edge cases"]
    if system.prerequisites:
        constraints.append(f"Prerequisites: {', '.join(system.prerequisites)}")
    return render_skill_md(SkillDoc(
        name=system.name,
        purpose=system.prd.problem,
        when_to_use=system.triggered_by,
        inputs=system.prd.inputs,
        process=system.prd.workflow,
        outputs=system.prd.outputs,
        quality_criteria=system.prd.success_metrics,
        constraints=constraints,
    ))


def convert_system_to_skill(system: System, example_date: str = "YYYY-MM-DD") -> Optional[GeneratedSkill]:
    """Skill for an agent/template/checklist/automation system; None for other types."""
    if system.type not in SKILLABLE_TYPES:
        return None

    slug = re.sub(r"^(agent|template|checklist|automation)-", "", system.id)
    integrations = _usable_integrations(system)
    config = SkillConfig(
        name=system.name,
        slug=slug,
        description=system.description,
        category=_CATEGORY_MAP.get(system.category, SkillCategory.OPERATIONS),
        inputs=inputs_from_prd(system),
        output=infer_output(system),
        integrations=integrations,
        triggers=SkillTriggers(keywords=extract_keywords(system)),
        permissions=SkillPermissions(
            read=[f"{i.lower()}.read" for i in integrations],
            write=(
                [f"{i.lower()}.write" for i in integrations]
                if system.type == SystemType.AUTOMATION else []
            ),
        ),
    )
    return GeneratedSkill(
        slug=slug,
        skill_md=system_skill_md(system),
        config_json=config,
        example_input=example_input(config, example_date),
        example_output=example_output(system),
        source_system=system.id,
    )


# ---------------------------------------------------------------------------
# Build-material skills
# ---------------------------------------------------------------------------

def _client_source(r: AuditResponse) -> str:
    return f"{r.text('tools_crm').lower()}.contacts" if r.has("tools_crm") else "manual"


def _tools(r: AuditResponse, *keys: str) -> list[str]:
    return [r.text(k) for k in keys if r.has(k)]


def task_automation_skill(task: str, r: AuditResponse) -> GeneratedSkill:
    slug = f"task-{slugify(task)[:30]}"
    name = f"{truncate(task, 40)} Assistant"
    config = SkillConfig(
        name=name,
        slug=slug,
        description=f"Automate or assist with: {task}",
        category=SkillCategory.OPERATIONS,
        inputs=[
            SkillInput("context", "Context", "textarea", True,
                       placeholder="Describe what needs to be done...",
                       help_text="Provide context for this task"),
            SkillInput("client", "Client (if applicable)", "select", False, source="hubspot.contacts"),
        ],
        output=SkillOutput(),
        integrations=_tools(r, "tools_pm"),
        triggers=SkillTriggers(keywords=[task.lower(), "task", "help with"]),
    )
    quality = r.text("quality_criteria_good_work")
    doc = SkillDoc(
        name=name,
        purpose=f'Assist with "{task}" - a repeated weekly task identified in the audit.',
        when_to_use=[
            "When this task comes up during the week",
            "To standardize how this task is completed",
            "To reduce time spent on repetitive work",
        ],
        inputs=["Context about the specific instance of this task", "Client information if relevant"],
        process=[
            "Review the context provided",
            "Apply standard process for this task type",
            "Generate appropriate output or next steps",
            "Flag any items that need human review",
        ],
        outputs=["Task completion checklist or output", "Flagged items for review",
                 "Time saved vs manual process"],
        quality_criteria=(
            [quality] if quality
            else ["Task completed correctly", "Follows standard process", "No errors or omissions"]
        ),
        constraints=[
            "Always flag unusual situations for human review",
            "Don't make assumptions about client preferences",
            "Escalate if unsure",
        ],
    )
    return GeneratedSkill(slug=slug, skill_md=render_skill_md(doc), config_json=config)


def decision_skill(pattern: str, idx: int) -> GeneratedSkill:
    slug = f"decision-{idx + 1}"
    name = f"Decision: {truncate(pattern, 40)}"
    config = SkillConfig(
        name=name,
        slug=slug,
        description=f"Decision framework for: {pattern}",
        category=SkillCategory.OPERATIONS,
        inputs=[
            SkillInput("situation", "Situation", "textarea", True,
                       placeholder="Describe the situation requiring a decision...",
                       help_text="What decision needs to be made?"),
            SkillInput("constraints", "Constraints", "textarea", False,
                       placeholder="Any constraints or special circumstances?"),
        ],
        output=SkillOutput(),
        integrations=[],
        triggers=SkillTriggers(keywords=["decision", "should I", "what do I do"]),
    )
    doc = SkillDoc(
        name=name,
        purpose=f'Provide decision guidance for: "{pattern}"',
        when_to_use=[
            "When facing this type of decision",
            "To ensure consistent decision-making",
            "To reduce owner involvement in routine decisions",
        ],
        inputs=["Description of the situation", "Any special constraints or circumstances"],
        process=[
            "Analyze the situation against known patterns",
            "Apply decision criteria",
            "Generate recommendation with reasoning",
            "Flag edge cases for human review",
        ],
        outputs=["Clear recommendation", "Reasoning behind the recommendation", "Confidence level",
                 "Escalation flag if needed"],
        quality_criteria=[
            "Decision aligns with company values and policies",
            "Reasoning is clear and logical",
            "Edge cases are properly flagged",
        ],
        constraints=[
            "Never make decisions outside defined scope",
            "Always explain reasoning",
            "Escalate low-confidence situations",
        ],
    )
    return GeneratedSkill(slug=slug, skill_md=render_skill_md(doc), config_json=config)


def _answer_lines(text: str) -> list[str]:
    return [line.strip() for line in text.split("\n")]


def qa_skill(r: AuditResponse) -> GeneratedSkill:
    criteria = r.text("quality_criteria_good_work")
    mistakes = r.text("common_mistakes_team")
    config = SkillConfig(
        name="Quality Assurance Checklist",
        slug="qa-checklist",
        description="Pre-delivery quality assurance checklist based on your standards",
        category=SkillCategory.QA,
        inputs=[
            SkillInput("deliverable_type", "Deliverable Type", "select", True,
                       options=["Design", "Copy", "Strategy", "Report", "Campaign", "Other"],
                       help_text="What type of deliverable is this?"),
            SkillInput("deliverable_description", "Description", "textarea", True,
                       placeholder="Briefly describe what was created..."),
            SkillInput("client", "Client", "select", True, source="hubspot.contacts"),
        ],
        output=SkillOutput(type="document"),
        integrations=_tools(r, "tools_pm"),
        triggers=SkillTriggers(keywords=["qa", "quality", "check", "review", "before sending"]),
    )
    mistake_items = _answer_lines(mistakes) if mistakes else [
        "Missing client name/details",
        "Using placeholder text",
        "Wrong file format",
    ]
    doc = SkillDoc(
        name="Quality Assurance Checklist",
        purpose="Ensure deliverables meet quality standards before client delivery.",
        when_to_use=[
            "Before sending ANY deliverable to a client",
            "After completing a project phase",
            "When doing peer review",
        ],
        inputs=["Type of deliverable", "Brief description", "Client name"],
        process=[
            "Run through quality criteria checklist",
            "Check for common mistakes",
            "Verify client-specific requirements",
            "Generate pass/fail report",
        ],
        outputs=["Checklist with pass/fail for each item", "List of issues found",
                 "Recommendation (ready to send / needs fixes)"],
        quality_criteria=_answer_lines(criteria) if criteria else [
            "Meets project requirements",
            "No spelling/grammar errors",
            "Brand guidelines followed",
            "Reviewed by second team member",
        ],
        quality_checklist=True,
        extra_sections=[("Common Mistakes to Check", [f"- [ ] NOT: {m}" for m in mistake_items])],
        constraints=[
            "Never skip the checklist",
            "All items must pass before delivery",
            "Document any exceptions with reasoning",
        ],
    )
    return GeneratedSkill(slug="qa-checklist", skill_md=render_skill_md(doc), config_json=config)


def automation_skill(wish: str, r: AuditResponse) -> GeneratedSkill:
    slug = f"automate-{slugify(wish)[:25]}"
    name = f"Automate: {truncate(wish, 40)}"
    config = SkillConfig(
        name=name,
        slug=slug,
        description=f"Automation for: {wish}",
        category=SkillCategory.OPERATIONS,
        inputs=[
            SkillInput("trigger_data", "Input Data", "textarea", True,
                       placeholder="Paste or enter the data that triggers this automation...",
                       help_text="What information starts this process?"),
        ],
        output=SkillOutput(),
        integrations=_tools(r, "tools_pm", "tools_crm", "tools_comm", "tools_automation"),
        triggers=SkillTriggers(keywords=wish.lower().split(" ")[:3]),
    )
    doc = SkillDoc(
        name=name,
        purpose=f"{wish}\n\nThis was identified as the #1 thing you'd want automated.",
        when_to_use=[
            "Whenever this task needs to be done",
            "To save time on repetitive work",
            "To ensure consistency",
        ],
        inputs=["The data or trigger that starts this process"],
        process=[
            "Parse the input data",
            "Execute the automated steps",
            "Generate the output",
            "Notify relevant parties",
        ],
        outputs=["Completed automation result", "Any items flagged for review",
                 "Confirmation of completion"],
        quality_criteria=[
            "Automation completes without errors",
            "Output matches expected format",
            "No manual intervention needed (except edge cases)",
        ],
        constraints=[
            "Flag unusual inputs for review",
            "Don't proceed if data is incomplete",
            "Log all automation runs",
        ],
    )
    return GeneratedSkill(slug=slug, skill_md=render_skill_md(doc), config_json=config)


def build_material_skills(r: AuditResponse) -> list[GeneratedSkill]:
    skills: list[GeneratedSkill] = []

    tasks = parse_text_list(r.text("repeated_tasks_weekly"), BULLETED_LIST_DELIMITERS)
    if tasks:
        skills.append(task_automation_skill(tasks[0], r))

    patterns = parse_text_list(r.text("judgment_calls_patterns"), BULLETED_LIST_DELIMITERS)
    skills.extend(decision_skill(p, idx) for idx, p in enumerate(patterns[:2]))

    if r.has("quality_criteria_good_work"):
        skills.append(qa_skill(r))

    if r.has("automate_one_thing"):
        skills.append(automation_skill(r.text("automate_one_thing"), r))

    return skills


# ---------------------------------------------------------------------------
# Common skills
# ---------------------------------------------------------------------------

STATUS_UPDATE_EXAMPLE_INPUT = {
    "client": "Acme Corp",
    "project": "Website Redesign",
    "status_type": "Weekly Update",
    "updates": "Completed homepage wireframes. Started design system. "
               "Finalized color palette with stakeholders.",
    "blockers": "Waiting on final logo files from brand team.",
    "next_steps": "Begin homepage high-fidelity designs once logo received. "
                  "Schedule mid-week check-in.",
    "tone": "Professional",
}

STATUS_UPDATE_EXAMPLE_OUTPUT = """Subject: Website Redesign - Weekly Update (Jan 27)

Hi Sarah,

Quick update on the website redesign project:

**Completed This Week:**
- Homepage wireframes finalized
- Design system framework started
- Color palette approved with your team

**Waiting On:**
- Final logo files from your brand team (needed to proceed with high-fidelity designs)

**Next Steps:**
- Begin homepage designs once logo received
- Mid-week check-in scheduled for Wednesday

Let me know if you have any questions or if there's anything you need from our side.

Best,
[Name]"""


def client_status_skill(r: AuditResponse) -> GeneratedSkill:
    crm_pm = _tools(r, "tools_crm", "tools_pm")
    config = SkillConfig(
        name="Client Status Update",
        slug="client-status-update",
        description="Draft a professional status update email for any client project",
        category=SkillCategory.COMMUNICATION,
        inputs=[
            SkillInput("client", "Client", "select", True, source=_client_source(r),
                       help_text="Select the client to update"),
            SkillInput("project", "Project", "select", True,
                       source=f"{r.text('tools_pm').lower()}.projects" if r.has("tools_pm") else "manual",
                       help_text="Which project is this update for?"),
            SkillInput("status_type", "Update Type", "select", True,
                       options=["Weekly Update", "Milestone Complete", "Issue/Blocker", "General Check-in"],
                       help_text="What kind of update is this?"),
            SkillInput("updates", "Key Updates", "textarea", True,
                       placeholder="What was accomplished? Be specific.",
                       help_text="List the main things completed or in progress"),
            SkillInput("blockers", "Blockers (if any)", "textarea", False,
                       placeholder="Any issues or things you need from the client?",
                       help_text="Leave blank if no blockers"),
            SkillInput("next_steps", "Next Steps", "textarea", True,
                       placeholder="What's happening next?",
                       help_text="What should the client expect?"),
            SkillInput("tone", "Tone", "select", False,
                       options=["Professional", "Friendly", "Formal", "Casual"],
                       help_text="Match the client's preferred communication style"),
        ],
        output=SkillOutput(type="email", format="plain"),
        integrations=crm_pm,
        triggers=SkillTriggers(
            keywords=["status update", "update email", "client update", "weekly update"],
        ),
        permissions=SkillPermissions(read=[f"{t.lower()}.read" for t in crm_pm]),
    )
    doc = SkillDoc(
        name="Client Status Update",
        purpose="Draft a professional status update email for a client project.",
        when_to_use=[
            "Weekly status updates",
            "Milestone completions",
            "When client needs project visibility",
            "After significant progress",
        ],
        inputs=["Client name", "Project name", "Status type (weekly, milestone, issue)",
                "Key updates (what was done)", "Blockers (if any)", "Next steps", "Tone preference"],
        process=[
            "Review the client's communication preferences",
            "Structure the email: greeting, updates, blockers (if any), next steps, closing",
            "Keep it concise - aim for 150-250 words",
            "Use bullet points for easy scanning",
            "End with a clear call-to-action if needed",
        ],
        outputs=["Subject line", "Email body", "Suggested send time (if relevant)"],
        quality_criteria=[
            "Professional but warm tone",
            'Specific, not vague ("completed homepage design" not "made progress")',
            "No jargon the client wouldn't understand",
            "Actionable next steps",
            "Appropriate length (not too long, not too short)",
        ],
        constraints=[
            "Never include internal team discussions",
            "Never mention budget/pricing unless specifically asked",
            "Never commit to dates without checking capacity",
            "Match the client's communication style (formal vs casual)",
        ],
    )
    return GeneratedSkill(
        slug="client-status-update",
        skill_md=render_skill_md(doc),
        config_json=config,
        example_input=dict(STATUS_UPDATE_EXAMPLE_INPUT),
        example_output=STATUS_UPDATE_EXAMPLE_OUTPUT,
    )


def meeting_summary_skill(r: AuditResponse) -> GeneratedSkill:
    config = SkillConfig(
        name="Meeting Summary",
        slug="meeting-summary",
        description="Generate a structured summary from meeting notes or transcript",
        category=SkillCategory.COMMUNICATION,
        inputs=[
            SkillInput("meeting_type", "Meeting Type", "select", True,
                       options=["Client Call", "Internal Sync", "Discovery Call",
                                "Project Kickoff", "Review Meeting"]),
            SkillInput("attendees", "Attendees", "text", True, placeholder="Who was on the call?"),
            SkillInput("notes_or_transcript", "Notes or Transcript", "textarea", True,
                       placeholder="Paste your notes or transcript here...",
                       help_text="Raw notes, bullet points, or full transcript"),
        ],
        output=SkillOutput(type="document"),
        integrations=_tools(r, "tools_comm"),
        triggers=SkillTriggers(
            keywords=["meeting summary", "summarize call", "meeting notes", "call summary"],
        ),
    )
    doc = SkillDoc(
        name="Meeting Summary",
        purpose="Generate a clean, structured summary from messy meeting notes or transcripts.",
        when_to_use=[
            "After any client call",
            "After internal meetings",
            "When you need to share meeting outcomes",
            "For documentation and records",
        ],
        inputs=["Meeting type", "Attendees", "Raw notes or transcript"],
        process=[
            "Parse the notes/transcript",
            "Identify key discussion points",
            "Extract action items with owners",
            "Note decisions made",
            "Capture questions/follow-ups needed",
            "Format into standard structure",
        ],
        outputs=[
            "Meeting details (date, type, attendees)",
            "Key discussion points",
            "Decisions made",
            "Action items (with owners and due dates if mentioned)",
            "Questions/Follow-ups",
            "Next meeting (if scheduled)",
        ],
        quality_criteria=[
            "All action items captured with clear owners",
            "No important points missed",
            "Easy to scan quickly",
            "Professional formatting",
        ],
        constraints=[
            "Don't add information not in the source",
            "Flag unclear action items for clarification",
            "Keep it factual, not interpretive",
        ],
    )
    return GeneratedSkill(slug="meeting-summary", skill_md=render_skill_md(doc), config_json=config)


def _service_names(r: AuditResponse) -> list[str]:
    services = r.get("services")
    if isinstance(services, list):
        names = [s.get("name") for s in services if isinstance(s, dict) and s.get("name")]
        if names:
            return names
    return ["Strategy", "Design", "Content", "Campaign"]


def brief_parser_skill(r: AuditResponse) -> GeneratedSkill:
    config = SkillConfig(
        name="Brief Parser",
        slug="brief-parser",
        description="Parse and structure incoming client briefs for project setup",
        category=SkillCategory.DELIVERY,
        inputs=[
            SkillInput("raw_brief", "Client Brief", "textarea", True,
                       placeholder="Paste the client brief or request here...",
                       help_text="Raw brief from client email, form, or document"),
            SkillInput("client", "Client", "select", True, source=_client_source(r)),
            SkillInput("service_type", "Service Type", "select", False, options=_service_names(r)),
        ],
        output=SkillOutput(type="document"),
        integrations=_tools(r, "tools_pm"),
        triggers=SkillTriggers(keywords=["parse brief", "new brief", "client request", "new project"]),
        permissions=SkillPermissions(
            write=[f"{r.text('tools_pm').lower()}.tasks"] if r.has("tools_pm") else [],
        ),
    )
    doc = SkillDoc(
        name="Brief Parser",
        purpose="Parse incoming client briefs into structured project requirements.",
        when_to_use=[
            "When a new client brief/request comes in",
            "To standardize project setup",
            "To ensure nothing is missed from the brief",
        ],
        inputs=["Raw client brief (email, document, form submission)", "Client name",
                "Service type (if known)"],
        process=[
            "Extract project objectives",
            "Identify deliverables requested",
            "Note timeline/deadline requirements",
            "Capture any specific requirements or preferences",
            "Flag missing information",
            "Generate structured brief document",
        ],
        outputs=[
            "Project summary",
            "Objectives",
            "Deliverables list",
            "Timeline",
            "Requirements/constraints",
            "Missing information (questions to ask)",
            "Suggested project tasks",
        ],
        quality_criteria=[
            "All deliverables clearly identified",
            "Missing info flagged before starting",
            "Timeline clearly stated",
            "Actionable task list generated",
        ],
        constraints=[
            "Don't assume scope beyond what's stated",
            "Always flag ambiguous requirements",
            "Include original brief text for reference",
        ],
    )
    return GeneratedSkill(slug="brief-parser", skill_md=render_skill_md(doc), config_json=config)


def common_skills(r: AuditResponse, spec: SystemSpecOutput) -> list[GeneratedSkill]:
    skills: list[GeneratedSkill] = []
    if not any("status" in s.id for s in spec.systems):
        skills.append(client_status_skill(r))
    skills.append(meeting_summary_skill(r))
    if "brief" in r.text("core_service_steps").lower() or r.has("example_client_brief"):
        skills.append(brief_parser_skill(r))
    return skills


# ---------------------------------------------------------------------------
# Entry point and markdown
# ---------------------------------------------------------------------------

def generate_skills(data: Any, system_spec: SystemSpecOutput, generated_at: str = "") -> SkillCatalog:
    """Skill catalog for one client, de-duplicated by slug (first wins)."""
    r = data if isinstance(data, AuditResponse) else AuditResponse(data)
    example_date = generated_at[:10] or "YYYY-MM-DD"

    candidates: list[GeneratedSkill] = []
    for system in system_spec.systems:
        skill = convert_system_to_skill(system, example_date)
        if skill is not None:
            candidates.append(skill)
    candidates.extend(build_material_skills(r))
    candidates.extend(common_skills(r, system_spec))

    skills: list[GeneratedSkill] = []
    seen: set[str] = set()
    for skill in candidates:
        if skill.slug not in seen:
            seen.add(skill.slug)
            skills.append(skill)

    by_category: dict[str, int] = {}
    integrations: list[str] = []
    for skill in skills:
        category = skill.config_json.category.value
        by_category[category] = by_category.get(category, 0) + 1
        for integration in skill.config_json.integrations:
            if integration not in integrations:
                integrations.append(integration)

    return SkillCatalog(
        client_name=r.text("company_name", "Unknown"),
        skills=skills,
        summary=SkillSummary(
            total_skills=len(skills),
            by_category=by_category,
            integrations_covered=integrations,
        ),
        generated_at=generated_at,
    )


def render_skills_markdown(catalog: SkillCatalog) -> str:
    lines: list[str] = []

    lines.append("# Generated Skills Catalog")
    lines.append("")
    lines.append(f"**Client:** {catalog.client_name}")
    if catalog.generated_at:
        lines.append(f"**Generated:** {catalog.generated_at[:10]}")
    lines.append(f"**Total Skills:** {catalog.summary.total_skills}")
    lines.append("")

    lines.extend(["## Summary by Category", ""])
    for category, count in catalog.summary.by_category.items():
        lines.append(f"- **{category}:** {count} skills")
    lines.append("")

    lines.extend(["## Integrations Covered", ""])
    lines.extend(f"- {integration}" for integration in catalog.summary.integrations_covered)
    lines.append("")

    lines.extend(["---", "", "## Skills", ""])
    for idx, skill in enumerate(catalog.skills, start=1):
        config = skill.config_json
        lines.append(f"### {idx}. {config.name}")
        lines.append("")
        lines.append(f"**Slug:** `{skill.slug}`")
        lines.append(f"**Category:** {config.category.value}")
        lines.append(f"**Description:** {config.description}")
        lines.append("")
        lines.append("**Inputs:**")
        for item in config.inputs:
            required = ", required" if item.required else ""
            lines.append(f"- {item.label} ({item.type}{required})")
        lines.append("")
        lines.append(f"**Output:** {config.output.type}")
        lines.append("")
        if config.integrations:
            lines.append(f"**Integrations:** {', '.join(config.integrations)}")
            lines.append("")
        lines.extend(["---", ""])

    return "\n".join(lines)
