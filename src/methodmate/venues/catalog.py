from __future__ import annotations

# Curated top HCI/design venues; full names and abbreviations side by side.
TOP_VENUES: tuple[str, ...] = (
    # conferences
    "Computer-Supported Cooperative Work",
    "CSCW",
    "Human Factors in Computing Systems",
    "CHI",
    "Pervasive and Ubiquitous Computing",
    "UbiComp",
    "User Interface Software and Technology",
    "UIST",
    # journals
    "Computers in Human Behavior",
    "CoDesign",
    "Technovation",
    "Design Studies",
    "Journal of Mixed Methods Research",
    "ACM Transactions on Computer-Human Interaction",
    "TOCHI",
    "International Journal of Human-Computer Studies",
    "Design Issues",
    "Human-Computer Interaction",
    "Computer-Aided Design",
    "Applied Ergonomics",
    "International Journal of Design",
    "Human Factors",
    "Leonardo",
    "The Design Journal",
)

# abbreviation -> full-name fragment that also identifies it
ABBREVIATIONS: dict[str, str] = {
    "cscw": "computer-supported cooperative work",
    "chi": "human factors in computing systems",
    "ubicomp": "pervasive and ubiquitous computing",
    "uist": "user interface software and technology",
    "tochi": "transactions on computer-human interaction",
}
