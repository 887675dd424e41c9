from __future__ import annotations

SECTIONS = [
    "project_name",
    "summary",
    "use_cases",
    "target_users",
    "inputs_outputs",
    "components",
    "prompt_strategy",
    "dataset_needs",
    "evaluation_metrics",
    "deployment",
    "ethics",
]

SECTION_DISPLAY = {
    "project_name": "Project Name",
    "summary": "Short Summary",
    "use_cases": "Use Cases and Goals",
    "target_users": "Target User Profiles",
    "inputs_outputs": "Required Inputs and Expected Outputs",
    "components": "Functional Components and Modules",
    "prompt_strategy": "Prompt Engineering Strategy",
    "dataset_needs": "Dataset Needs and Sources",
    "evaluation_metrics": "Evaluation Metrics and Success Criteria",
    "deployment": "Scalability and Deployment Recommendations",
    "ethics": "Ethical and Bias Considerations",
}

# Sections synthesized from the whole interview rather than from matching turns.
SYNTHESIS_SECTIONS = {"project_name", "summary"}

# Free-form hints the model tends to produce, mapped onto the fixed sections.
SECTION_ALIASES = {
    "name": "project_name",
    "title": "project_name",
    "overview": "summary",
    "goals": "use_cases",
    "goal": "use_cases",
    "use_case": "use_cases",
    "scenarios": "use_cases",
    "users": "target_users",
    "audience": "target_users",
    "personas": "target_users",
    "inputs": "inputs_outputs",
    "outputs": "inputs_outputs",
    "io": "inputs_outputs",
    "architecture": "components",
    "modules": "components",
    "features": "components",
    "prompts": "prompt_strategy",
    "prompting": "prompt_strategy",
    "prompt_engineering": "prompt_strategy",
    "data": "dataset_needs",
    "dataset": "dataset_needs",
    "datasets": "dataset_needs",
    "metrics": "evaluation_metrics",
    "evaluation": "evaluation_metrics",
    "success_criteria": "evaluation_metrics",
    "scalability": "deployment",
    "infrastructure": "deployment",
    "hosting": "deployment",
    "bias": "ethics",
    "privacy": "ethics",
    "compliance": "ethics",
    "safety": "ethics",
}

INSUFFICIENT_INFORMATION = "Insufficient information."

PERSONA_DISPLAY = {
    "default": "Default",
    "product_manager": "Product Manager",
    "llm_architect": "LLM Architect",
    "ux_designer": "UX Designer",
    "compliance_officer": "Compliance Officer",
}

PERSONA_ALIASES = {
    "pm": "product_manager",
    "product": "product_manager",
    "product_manager": "product_manager",
    "architect": "llm_architect",
    "llm_architect": "llm_architect",
    "ux": "ux_designer",
    "designer": "ux_designer",
    "ux_designer": "ux_designer",
    "compliance": "compliance_officer",
    "compliance_officer": "compliance_officer",
}

PERSONA_PROMPTS = {
    "default": (
        "You are an intelligent project definition wizard that helps users define LLM-based applications. "
        "Ask thoughtful, context-aware questions that build on previous answers."
    ),
    "product_manager": (
        "You are a Product Manager helping to define an LLM-based application. "
        "Focus on user needs, market fit, success metrics and the product roadmap."
    ),
    "llm_architect": (
        "You are an LLM Architect helping to define an LLM-based application. "
        "Focus on model selection, prompt engineering, data requirements and system architecture."
    ),
    "ux_designer": (
        "You are a UX Designer helping to define an LLM-based application. "
        "Focus on user experience, interface design, user flows and accessibility."
    ),
    "compliance_officer": (
        "You are a Compliance Officer helping to define an LLM-based application. "
        "Focus on data privacy, ethical considerations, regulatory requirements and risk mitigation."
    ),
}

DEFAULT_DOMAINS = [
    "Accounting",
    "Advertising",
    "Aerospace",
    "Agriculture",
    "AI Research",
    "Architecture",
    "Art",
    "Automotive",
    "Banking",
    "Biotechnology",
    "Blockchain",
    "Chemistry",
    "Childcare",
    "Cinema",
    "Civil Engineering",
    "Climate Science",
    "Cloud Computing",
    "Construction",
    "Consulting",
    "Cosmetics",
    "Cryptocurrency",
    "Cybersecurity",
    "Data Analysis",
    "Defense",
    "Design",
    "E-commerce",
    "Economics",
    "Electrical Engineering",
    "Electronics",
    "Energy",
    "Entertainment",
    "Environmental Science",
    "Event Management",
    "Fashion",
    "Film Production",
    "Financial Services",
    "Fitness",
    "Food Service",
    "Forestry",
    "Gaming",
    "Government",
    "Graphic Design",
    "Healthcare",
    "Hospitality",
    "Human Resources",
    "Industrial Design",
    "Information Technology",
    "Insurance",
    "Interior Design",
    "International Relations",
    "Journalism",
    "Law Enforcement",
    "Linguistics",
    "Logistics",
    "Manufacturing",
    "Marine Biology",
    "Marketing",
    "Materials Science",
    "Mathematics",
    "Mechanical Engineering",
    "Media",
    "Medicine",
    "Mental Health",
    "Mining",
    "Music",
    "Nanotechnology",
    "Natural Language Processing",
    "Neuroscience",
    "Non-profit",
    "Nuclear Engineering",
    "Nutrition",
    "Oil & Gas",
    "Pharmaceuticals",
    "Philosophy",
    "Photography",
    "Physics",
    "Politics",
    "Psychology",
    "Public Health",
    "Public Relations",
    "Publishing",
    "Quantum Computing",
    "Real Estate",
    "Renewable Energy",
    "Retail",
    "Robotics",
    "Sales",
    "Science Communication",
    "Social Media",
    "Social Work",
    "Software Development",
    "Space Exploration",
    "Sports",
    "Supply Chain",
    "Telecommunications",
    "Textiles",
    "Tourism",
    "Transportation",
    "Urban Planning",
    "UX/UI Design",
    "Veterinary Medicine",
    "Video Production",
    "Virtual Reality",
    "Web Development",
    "Wildlife Conservation",
    "Acoustics",
    "Aeronautics",
    "AgriTech",
    "Animal Husbandry",
    "Anthropology",
    "Archaeology",
    "Astrophysics",
    "Augmented Reality",
    "Aviation",
    "Bioinformatics",
    "Biomedical Engineering",
    "Botany",
    "Business Intelligence",
    "Cartography",
    "Chemical Engineering",
    "Computer Vision",
    "Criminology",
    "Cryptography",
    "Culinary Arts",
    "Customer Relationship Management (CRM)",
    "Data Science",
    "Dentistry",
    "Digital Forensics",
    "E-learning",
    "Ecology",
    "Education Technology",
    "Emergency Services",
    "Energy Storage",
    "Epidemiology",
    "Ergonomics",
    "Ethics",
    "Facility Management",
    "Finance Technology (FinTech)",
    "Fisheries",
    "Food Technology",
    "Game Development",
    "Genomics",
    "Geology",
    "Geopolitics",
    "Gerontology",
    "Green Technology",
    "Horticulture",
    "Hydrology",
    "Industrial Automation",
    "Inventory Management",
    "IoT (Internet of Things)",
    "Landscape Architecture",
    "Library Science",
    "Machine Learning",
    "Meteorology",
    "Microbiology",
    "Mobile Development",
    "Oceanography",
    "Operations Research",
    "Optics",
    "Paleontology",
    "Performing Arts",
    "Petroleum Engineering",
    "Pharmacology",
    "Political Science",
    "Project Management",
    "Quality Assurance",
    "Recycling",
    "Remote Sensing",
    "Risk Management",
    "Security Systems",
    "Sociology",
    "Speech Recognition",
    "Sports Analytics",
    "Sustainable Development",
    "Taxation",
    "Thermodynamics",
    "Travel Technology",
    "Veterinary Technology",
    "Waste Management",
    "Water Resources",
    "Zoology",
]
