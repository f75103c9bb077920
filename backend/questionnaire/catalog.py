"""Static questionnaire content.

Two flows share one schema: the short valuation quiz (every answer feeds the
SDE x multiple calculation) and the post-sale deep dive used to build
systems and extract IP. Order is significant; the client walks the
questions in the order listed here.
"""

from __future__ import annotations

from typing import Any, Optional

from backend.questionnaire.schema import Question, QuestionSection, QuestionType, ShowIf

T = QuestionType


def q(
    id: str,
    question: str,
    type: QuestionType,
    field: Optional[str] = None,
    show_if: Optional[dict[str, Any]] = None,
    **kwargs: Any,
) -> Question:
    """Question whose answer key defaults to its id."""
    return Question(
        id=id,
        question=question,
        type=type,
        field=field or id,
        show_if=ShowIf(**show_if) if show_if else None,
        **kwargs,
    )


YES_NO = ["Yes", "No"]
YES_SOME_NO = ["Yes", "Some", "No"]


VALUATION_SECTIONS: list[QuestionSection] = [
    QuestionSection(
        title="Your Numbers",
        description="A few financials to calculate your valuation",
        questions=[
            q("val_annual_revenue", "What was your total revenue in the last 12 months?", T.NUMBER,
              field="annual_revenue", required=True, placeholder="e.g., 1200000",
              help_text="Ballpark is fine. This is the foundation of your valuation."),
            q("val_profit_margin", "What's your approximate profit margin?", T.SELECT,
              field="profit_margin", required=True,
              options=["Less than 10%", "10-20%", "20-30%", "30-40%", "40%+", "Not sure"],
              help_text="Revenue minus all expenses, before your salary. Best guess works."),
            q("val_owner_comp", "What do you pay yourself per year?", T.NUMBER,
              field="owner_annual_comp", required=True, placeholder="e.g., 150000",
              help_text="Total compensation: salary, draws, distributions."),
            q("val_revenue_model", "How do most clients pay you?", T.SELECT,
              field="revenue_model", required=True,
              options=["Mostly project-based", "Mix of projects and retainers",
                       "Mostly retainers / recurring"],
              help_text="Recurring revenue commands a significantly higher exit multiple."),
        ],
    ),
    QuestionSection(
        title="Your Business",
        description="How your agency operates today",
        questions=[
            q("val_client_count", "How many active clients do you have right now?", T.NUMBER,
              field="client_count", required=True,
              help_text="Currently paying or in active engagements"),
            q("val_top_client_pct",
              "What percentage of revenue comes from your single largest client?", T.SELECT,
              field="top_client_pct", required=True,
              options=["Less than 10%", "10-25%", "25-50%", "More than 50%"],
              help_text="High concentration = high risk. Acquirers penalize this heavily."),
            q("val_team_size", "How many people on your team, not including you?", T.NUMBER,
              field="team_size", required=True, min=0,
              help_text="Full-time, part-time, and contractors all count"),
            q("val_owner_hours", "How many hours per week do you work?", T.NUMBER,
              field="owner_hours_per_week", required=True, min=0, max=168,
              placeholder="e.g., 55", help_text="Be honest. We've seen it all."),
            q("val_owner_project_involvement",
              "What percentage of client projects require your direct involvement?", T.SELECT,
              field="owner_project_involvement", required=True,
              options=["Nearly all (90%+)", "Most (70-90%)", "About half (40-70%)",
                       "Some (20-40%)", "Few or none (<20%)"],
              help_text="Direct involvement means you're doing the work, not just reviewing it."),
            q("val_owner_sales_pct", "What percentage of sales do you personally close?", T.SELECT,
              field="owner_sales_pct", required=True,
              options=["I close all of them (100%)", "I close most (75%+)", "About half (50%)",
                       "My team closes most (<25%)", "I don't do sales"],
              help_text="If you're the only one who can close deals, growth is capped by your calendar."),
            q("val_approval_frequency",
              "How often does your team need your approval to move forward?", T.SELECT,
              field="approval_frequency", required=True,
              options=["Multiple times per day", "Daily", "A few times per week",
                       "Weekly or less", "Rarely, they operate independently"],
              help_text="High frequency = you're the bottleneck. Low frequency = you have systems."),
        ],
    ),
    QuestionSection(
        title="The Exit Test",
        description="Three questions that determine your exit price",
        questions=[
            q("val_without_you",
              "If you disappeared for 4 weeks (no phone, no email, no Slack), what happens?",
              T.SELECT, field="without_you", required=True,
              options=["It would run fine without me", "Some things would slip, but it'd survive",
                       "Major problems, clients would notice",
                       "Everything stops. The business IS me."],
              help_text="This is the question every acquirer asks. Your answer determines your multiple."),
            q("val_documented", "How much of your delivery process is documented?", T.SELECT,
              field="documented_level", required=True,
              options=["Nothing is documented", "A few rough notes here and there",
                       "Most processes have some documentation",
                       "Fully documented with SOPs and templates"],
              help_text="Documented processes = transferable value. Undocumented = it dies with you."),
            q("val_proprietary", "Do you have a named, proprietary method or framework?", T.SELECT,
              field="has_proprietary_method", required=True, options=["Yes", "Sort of", "No"],
              help_text="A named methodology is intellectual property."),
        ],
    ),
    QuestionSection(
        title="Get Your Results",
        description="Where should we send your valuation?",
        questions=[
            q("lead_full_name", "What's your name?", T.TEXT, field="full_name", required=True,
              placeholder="Sarah Chen", help_text="So we know who to address your valuation to"),
            q("lead_email", "What's your email?", T.TEXT, field="email", required=True,
              placeholder="sarah@agency.com", help_text="We'll send your full valuation report here"),
            q("lead_company_name", "What's your company name?", T.TEXT, field="company_name",
              required=True, placeholder="Meridian Digital", help_text="Your agency or company name"),
        ],
    ),
]


POST_SALE_SECTIONS: list[QuestionSection] = [
    QuestionSection(
        title="Services & Revenue Details",
        description="Detailed breakdown of how you make money (5 questions)",
        questions=[
            q("pricing_models", "How do you charge clients?", T.MULTISELECT,
              options=["Hourly billing", "Fixed project fees", "Monthly retainers",
                       "Value-based pricing", "Performance-based (% of results)", "Other"],
              help_text="Select all that apply"),
            q("services", "What are your top 3 services?", T.SERVICES,
              help_text="Include the % of revenue each brings in and typical project value"),
            q("acquisition_channels", "How do you acquire most of your clients? (Select top 3 in order)",
              T.MULTISELECT,
              options=["Referrals from past clients", "Inbound (website, content, SEO)",
                       "Outbound (cold email, LinkedIn)", "Partnerships/affiliates", "Paid ads",
                       "Events/conferences", "Other"],
              help_text="Referral-heavy = hard to scale. Inbound = product-ready"),
            q("avg_client_tenure", "How long does the average client relationship last?", T.SELECT,
              options=["Less than 3 months", "3-6 months", "6-12 months", "1-2 years", "2+ years"],
              help_text="Longer = better LTV, more productizable"),
            q("revenue_goal_12mo", "What's your revenue goal for the next 12 months?", T.NUMBER,
              placeholder="e.g., 2000000"),
        ],
    ),
    QuestionSection(
        title="Owner Tasks & Delegation",
        description="What only you can do, and why (11 questions)",
        questions=[
            q("tasks_only_owner", "What tasks can only you do?", T.TEXTAREA, required=True,
              placeholder="e.g., Strategy, client calls, QA, pricing...",
              help_text="These are the highest-priority areas to systematize"),
            q("decisions_only_owner", "What decisions can only you make?", T.TEXTAREA, required=True,
              placeholder="e.g., Taking a client, pricing, scope changes...",
              help_text="These need decision frameworks, not just SOPs"),
            q("wish_could_delegate", "What ONE thing do you wish someone else could do?", T.TEXTAREA,
              required=True, placeholder="The task causing you the most pain...",
              help_text="This becomes your top priority to fix"),
            q("delivery_bottleneck", "What's the biggest bottleneck in your delivery process right now?",
              T.TEXTAREA, placeholder="Be specific..."),
            q("sales_bottleneck", "What's the biggest bottleneck in your sales process right now?",
              T.TEXTAREA, placeholder="Be specific..."),
            q("approval_frequency", "How often do team members need your input/approval to move forward?",
              T.SELECT,
              options=["Multiple times per day", "Daily", "Few times per week", "Weekly", "Rarely"],
              help_text="High frequency = trust gap or clarity gap (both fixable with systems)"),
            q("core_service_steps", "For your CORE service, list the main steps from start to finish:",
              T.TEXTAREA, required=True,
              placeholder="e.g., 1. Discovery call, 2. Strategy doc, 3. Client approval, "
                          "4. Execution, 5. Review, 6. Delivery...",
              help_text="Be specific, this is the workflow we'll map out"),
            q("typical_project_duration", "How long does your typical project take from start to delivery?",
              T.SELECT,
              options=["Less than 1 week", "1-2 weeks", "2-4 weeks", "1-2 months", "2-3 months",
                       "3+ months", "Ongoing retainer (no end date)"]),
            q("onboard_blocker", "What's the biggest challenge when onboarding clients without you?",
              T.TEXTAREA, placeholder="What's the specific blocker?"),
            q("delivery_blocker", "What's the biggest challenge when delivering projects without you?",
              T.TEXTAREA, placeholder="What's the specific blocker?"),
            q("sales_blocker", "What's the biggest challenge when closing sales without you?",
              T.TEXTAREA, placeholder="What's the specific blocker?"),
        ],
    ),
    QuestionSection(
        title="Systems & Tools",
        description="Current documentation, tools, and process maturity (15 questions)",
        questions=[
            q("has_sops", "Do you have written Standard Operating Procedures (SOPs)?", T.SELECT,
              options=YES_SOME_NO, help_text="Existing SOPs = foundation to build on"),
            q("sop_list", "For which processes do you have SOPs?", T.TEXTAREA,
              placeholder="List the processes you've documented...",
              show_if={"field": "has_sops", "not_equals": "No"}),
            q("template_types", "Which deliverables have templates? (Select all that apply)",
              T.MULTISELECT,
              options=["Proposals/quotes", "Contracts", "Onboarding docs", "Project briefs",
                       "Strategy decks", "Reports/dashboards", "Creative briefs", "Other"],
              help_text="More templates = more productization-ready"),
            q("reinvent_frequency", "How often do you 'reinvent the wheel' on projects?", T.SELECT,
              options=["Every single project", "Most projects", "About half the time", "Rarely",
                       "Never - we have systems"],
              help_text="'Every project' = huge waste. Easy fix with templates"),
            q("tools_crm", "What CRM do you use?", T.TEXT, placeholder="e.g., HubSpot, Pipedrive, None"),
            q("tools_pm", "What project management tool do you use?", T.TEXT,
              placeholder="e.g., Asana, ClickUp, Monday, None"),
            q("tools_comm", "What communication tool(s) do you use?", T.TEXT,
              placeholder="e.g., Slack, Teams, Email"),
            q("tools_storage", "What file storage do you use?", T.TEXT,
              placeholder="e.g., Google Drive, Dropbox, OneDrive"),
            q("tools_accounting", "What invoicing/accounting tool do you use?", T.TEXT,
              placeholder="e.g., QuickBooks, Xero, FreshBooks"),
            q("onboarding_documented", "Is your client onboarding process documented?", T.SELECT,
              options=["Yes", "Partially", "No"]),
            q("has_kickoff_checklist", "Do you have a project kickoff checklist?", T.SELECT,
              options=YES_NO, help_text="Checklists = easy to build, high impact"),
            q("has_qc_checklist", "Do you have a quality control checklist before delivering work?",
              T.SELECT, options=YES_NO, help_text="QC checklist = delegate quality assurance"),
            q("onboard_time_new_hire",
              "If you hired someone new tomorrow, how long until they're productive?", T.SELECT,
              options=["1-2 weeks", "3-4 weeks", "2-3 months", "6+ months",
                       "They'd never be fully productive (too custom)"],
              help_text=">2 months = documentation problem"),
            q("top_systematize_need", "What's the #1 process you wish was systematized/documented?",
              T.TEXTAREA, required=True,
              placeholder="The one process that would change everything...",
              help_text="This becomes a top priority for improvement"),
            q("failed_systematization",
              "What have you tried to systematize before that didn't stick, and why?", T.TEXTAREA,
              placeholder="e.g., Built SOPs no one uses because they were too complex..."),
        ],
    ),
    QuestionSection(
        title="Team Details",
        description="Team composition, skills, and delegation readiness (12 questions)",
        questions=[
            q("team_ft", "How many are full-time employees?", T.NUMBER, min=0),
            q("team_pt", "How many are part-time employees?", T.NUMBER, min=0,
              help_text="Contractor-heavy = harder to systematize"),
            q("team_contractors", "How many are contractors/freelancers?", T.NUMBER, min=0),
            q("missing_skills", "What skills are currently missing on your team?", T.TEXTAREA,
              placeholder="List the skill gaps...", help_text="Skill gaps vs. process gaps"),
            q("team_can_scale", "Can your team scale delivery without adding more people?", T.SELECT,
              options=["Yes", "Maybe", "No"]),
            q("scale_blocker", "What's preventing your team from scaling?", T.TEXTAREA,
              placeholder="What's the specific blocker?",
              help_text="Process problem or capacity problem?",
              show_if={"field": "team_can_scale", "not_equals": "Yes"}),
            q("team_autonomy", "Do team members have ownership/autonomy over their work?", T.SELECT,
              options=["Yes", "Somewhat", "No"], help_text="Autonomy = systems + trust"),
            q("wish_team_could_decide", "What decisions do you wish your team could make without you?",
              T.TEXTAREA, required=True, placeholder="List specific decisions...",
              help_text="These are candidates for decision frameworks"),
            q("training_method", "How do you currently train new team members?", T.SELECT,
              options=["Formal onboarding program", "Shadow experienced team members",
                       "Here's the docs, figure it out", "I personally train everyone",
                       "We don't really have a process"],
              help_text="'I personally train' = bottleneck"),
            q("has_account_manager", "Do you have a dedicated account manager or project manager?",
              T.SELECT,
              options=["Yes, dedicated AM/PM", "Yes, but they also do other work",
                       "No - I manage all clients"],
              help_text="AM/PM = key handoff point for owner removal"),
            q("team_member_who_could_lead",
              "Is there a team member who could take over client-facing work if given the right systems?",
              T.SELECT,
              options=["Yes, I have someone ready", "Maybe, with training", "No, need to hire",
                       "I haven't thought about it"],
              help_text="Succession planning for owner removal"),
            q("delegation_blockers", "What stops you from delegating more? (Select all that apply)",
              T.MULTISELECT,
              options=["They don't have the skills yet", "I can do it faster myself",
                       "Clients expect to work with me", "No clear process to follow",
                       "Trust issues with quality", "They're already at capacity",
                       "I actually enjoy doing the work"],
              help_text="Each blocker has a specific solution"),
        ],
    ),
    QuestionSection(
        title="Market & Productization",
        description="Positioning, differentiation, and product readiness (17 questions)",
        questions=[
            q("agency_description", "How do you describe what your agency does? (In one sentence)",
              T.TEXTAREA, required=True,
              placeholder="e.g., We build conversion-focused websites for DTC brands",
              help_text="Clarity test. Rambling = positioning problem"),
            q("differentiation", "What makes you different from competitors?", T.TEXTAREA,
              required=True, placeholder="What's your unique approach or advantage?",
              help_text="Unique mechanism reveals productization angle"),
            q("proprietary_method_description", "What is your methodology called and how does it work?",
              T.TEXTAREA,
              placeholder="e.g., The SaaS Growth Framework - 4-stage methodology for...",
              help_text="If you have this, it becomes the center of your productized offering",
              show_if={"field": "has_proprietary_method", "not_equals": "No"}),
            q("client_praise", "What do clients rave about most?", T.TEXTAREA,
              placeholder="What do they consistently love?", help_text="This is what to productize"),
            q("client_complaints", "What do clients complain about most?", T.TEXTAREA,
              placeholder="Be honest...",
              help_text="Complaints reveal delivery gaps (fixable with systems)"),
            q("tried_productization", "Have you tried to productize or package your services before?",
              T.SELECT, options=["Yes", "No", "Thinking about it"]),
            q("productization_attempt", "What productization did you try?", T.TEXTAREA,
              placeholder="Describe the attempt...",
              show_if={"field": "tried_productization", "equals": "Yes"}),
            q("productization_outcome", "What happened with that productization attempt?", T.TEXTAREA,
              placeholder="What was the result?",
              show_if={"field": "tried_productization", "equals": "Yes"}),
            q("has_audience", "Do you have an audience? (Email list, social following, etc.)", T.SELECT,
              options=["Yes", "Small audience", "No"]),
            q("audience_size", "How big is your audience and where?", T.TEXT,
              placeholder="e.g., 5K email list, 10K LinkedIn followers",
              help_text="Audience = distribution for product launch",
              show_if={"field": "has_audience", "not_equals": "No"}),
            q("ideal_client_description", "Who is your ideal client? (Describe in detail)", T.TEXTAREA,
              required=True, placeholder="Be specific about industry, size, challenges, etc.",
              help_text="ICP clarity = productization readiness"),
            q("core_problem_solved", "What specific problem do you solve better than anyone?",
              T.TEXTAREA, required=True, placeholder="The ONE problem you're best at solving...",
              help_text="Problem clarity = product positioning"),
            q("product_blockers",
              "What's stopping you from launching a product right now? (Select all that apply)",
              T.MULTISELECT,
              options=["Don't know what to build", "Don't trust my product instincts",
                       "No time to build it", "Internal systems are too chaotic first",
                       "Don't know how to validate it", "Worried it won't sell",
                       "Team can't handle more work", "Other"]),
            q("dream_product", "What would your dream 'productized' offering look like?", T.TEXTAREA,
              required=True, placeholder="Describe your ideal productized offering..."),
            q("has_client_tiers", "Do you have different tiers or packages of service?", T.SELECT,
              options=["Yes, clearly defined tiers", "Sort of - informal differences",
                       "No - everything is custom"],
              help_text="Tiered services = easier to systematize and productize"),
            q("client_tier_description",
              "Describe your service tiers (names, what's included, price ranges)", T.TEXTAREA,
              placeholder="e.g., Starter: $2K/mo - basic support | Growth: $5K/mo - full service",
              show_if={"field": "has_client_tiers", "not_equals": "No - everything is custom"}),
            q("client_industry_concentration",
              "Do your clients cluster in specific industries? (Select all that apply)", T.MULTISELECT,
              options=["SaaS/Tech", "E-commerce/DTC", "Professional services", "Healthcare",
                       "Real estate", "Finance/Fintech", "Education", "Non-profit",
                       "Local/small business", "Other", "No - very diverse"]),
        ],
    ),
    QuestionSection(
        title="Vision Details",
        description="Long-term goals and fears (4 questions)",
        questions=[
            q("vision_12mo", "Where do you want your agency to be in 12 months?", T.TEXTAREA,
              required=True, placeholder="Be specific about revenue, team, time, systems..."),
            q("vision_3yr", "Where do you want your agency to be in 3 years?", T.TEXTAREA,
              placeholder="Long-term vision..."),
            q("personal_success_definition", "What does 'success' look like for you personally?",
              T.TEXTAREA, placeholder="Money, freedom, impact, legacy?"),
            q("delivery_exit_fear", "What's your biggest fear about stepping back from delivery?",
              T.TEXTAREA, placeholder="What worries you most?",
              help_text="Reveals the real objection to delegation"),
        ],
    ),
    QuestionSection(
        title="Delivery Workflow & Build Materials",
        description="How you work, the skeleton for your systems (8 questions)",
        questions=[
            q("core_delivery_walkthrough",
              "Walk us through your typical client engagement from kickoff to final delivery. "
              "What are the major phases and who does what?", T.TEXTAREA, required=True,
              placeholder="e.g., Phase 1: Discovery (I lead) - intake call, gather requirements...",
              help_text="This is the skeleton for your delivery workflow. Be as specific as possible."),
            q("most_repeated_tasks",
              "List the 3-5 tasks you or your team do repeatedly every week. Be specific.",
              T.TEXTAREA, required=True,
              placeholder="e.g., 1. Write weekly status email to clients (30 min each, 8 clients)...",
              help_text="High frequency = high impact for automation"),
            q("judgment_calls",
              "What are the 3-5 judgment calls you make regularly? Where do you have to "
              "'use your brain' vs. follow a process?", T.TEXTAREA, required=True,
              placeholder="e.g., 1. Deciding if a client request is in scope or out of scope...",
              help_text="These become decision frameworks. Hardest to systematize but highest value."),
            q("quality_criteria",
              "How do you know when work is 'good enough' to send to a client? What do you check for?",
              T.TEXTAREA, required=True,
              placeholder="e.g., I check: 1. Does it match the brief? 2. Is the formatting consistent?...",
              help_text="This becomes your QA checklist and review criteria."),
            q("common_mistakes", "What are the most common mistakes or issues that come up in delivery?",
              T.TEXTAREA,
              placeholder="e.g., 1. Team misinterprets brief - I clarify and they redo...",
              help_text="Edge cases and error handling for your systems."),
            q("tribal_knowledge",
              "What knowledge lives only in your head that would take weeks to teach someone new?",
              T.TEXTAREA, required=True,
              placeholder="e.g., 1. How to handle our biggest client's preferences...",
              help_text="Knowledge extraction priority. This is the IP that needs documenting."),
            q("must_stay_human", "What parts of your work should NEVER be automated or delegated?",
              T.TEXTAREA, required=True,
              placeholder="e.g., Final client presentations, pricing negotiations...",
              help_text="Boundaries. Prevents building something you'll reject."),
            q("tool_pain_points",
              "Which tools cause the most friction? What do you wish worked better or was connected?",
              T.TEXTAREA, placeholder="e.g., HubSpot and Asana don't talk to each other...",
              help_text="Identifies where automation and integration add the most value."),
        ],
    ),
    QuestionSection(
        title="Final Insights",
        description="Anything we missed (2 questions)",
        questions=[
            q("missing_questions", "What am I NOT asking that I should be asking?", T.TEXTAREA,
              placeholder="What questions should I have asked?"),
            q("other_notes", "Anything else you want to share?", T.TEXTAREA,
              placeholder="Any final thoughts, questions, or information..."),
        ],
    ),
]

QUESTION_SECTIONS: list[QuestionSection] = VALUATION_SECTIONS + POST_SALE_SECTIONS


def question_count(sections: list[QuestionSection]) -> int:
    return sum(len(section.questions) for section in sections)


def get_question(question_id: str) -> Optional[Question]:
    for section in QUESTION_SECTIONS:
        for question in section.questions:
            if question.id == question_id:
                return question
    return None
