"""Static IFRS FSA Level 1 curriculum outline."""

from study_quiz.models.quiz import CourseTopic

# One node per line: "<id> | <title>", nesting by four-space indentation.
CURRICULUM_OUTLINE = """
part-i | PART I: THE NEED FOR SUSTAINABILITY DISCLOSURE STANDARDS
    1 | 1. Demand for Sustainability Information
        1.1 | 1.1. What is sustainability?
        1.2 | 1.2. Growing investor demand
        1.3 | 1.3. Demand within companies
        1.4 | 1.4. Other institutions driving demand
    2 | 2. The Historical Basis for Disclosure
        2.1 | 2.1. The aftermath of the stock market crash of 1929
        2.2 | 2.2. Disclosure as the basis of regulatory reform
        2.3 | 2.3. The road to standardized accounting procedures
    3 | 3. Materiality: a guiding principle for required disclosure
        3.1 | 3.1. A long-standing legacy of investor decision-making
        3.2 | 3.2. General characteristics of materiality
        3.3 | 3.3. Materiality changes over time
        3.4 | 3.4. Nuances throughout the disclosure ecosystem
    4 | 4. The limitations of financial disclosure
        4.1 | 4.1. Financial information beyond financial statements: the use of non-GAAP
        4.2 | 4.2. The changing nature of market value
        4.3 | 4.3. The scope of financial reporting expands
        4.4 | 4.4. New tools for investors
part-ii | PART II: THE SUSTAINABILITY INFORMATION ECOSYSTEM
    5 | 5. Introduction to the sustainability information value chain and the role of data providers
        5.1 | 5.1. Growth of the ecosystem: a maturing industry
        5.2 | 5.2. The role of data providers
        5.3 | 5.3. Sustainability data’s unique challenges
    6 | 6. The Role of Standards And Frameworks: From Fragmentation to Cohesion in Sustainability Disclosure
        6.1 | 6.1. The role of standard-setters
        6.2 | 6.2. Formative standards and frameworks
        6.3 | 6.3. Distinguishing characteristics of sustainability disclosure guidance
        6.4 | 6.4. Creating a coherent system for comprehensive reporting – simplification through consolidation
    7 | 7. Materiality: going beyond investors
        7.1 | 7.1. Materiality applied to sustainability disclosure
        7.2 | 7.2. Materiality in the IFRS Sustainability Disclosure Standards
        7.3 | 7.3. Materiality in the GRI Standards
        7.4 | 7.4. Materiality in the European Sustainability Reporting Standards
        7.5 | 7.5. Process vs. outcomes
    8 | 8. Sustainability disclosure across jurisdictions
        8.1 | 8.1. The relationship between standard-setters and regulators
        8.2 | 8.2. The growing prevalence of regulatory disclosure guidance
        8.3 | 8.3. Common types of sustainability reporting rules
        8.4 | 8.4. Types of guidance shaping global disclosure rules
        8.5 | 8.5. The influence of corporate governance codes
        8.6 | 8.6. Balancing flexible implementation with usable information
part-iii | PART III: UNDERSTANDING IFRS SUSTAINABILITY DISCLOSURE STANDARDS
    9 | 9. What is useful sustainability-related financial information?
        9.1 | 9.1. The importance of standards
        9.2 | 9.2. Sustainability: a unique context
        9.3 | 9.3. The goals of the International Sustainability Standards Board
        9.4 | 9.4. Additional characteristics of the IFRS Sustainability Disclosure Standards
        9.5 | 9.5. The primary objective of the IFRS Sustainability Disclosure Standards
    10 | 10. The IFRS Sustainability Disclosure Standards
        10.1 | 10.1. Core content
        10.2 | 10.2. Conceptual foundations
        10.3 | 10.3. Determining what information to disclose
    11 | 11. Setting IFRS Sustainability Disclosure Standards
        11.1 | 11.1. The structure of the IFRS Foundation
        11.2 | 11.2. Developing the first IFRS Sustainability Disclosure Standards
        11.3 | 11.3. Maintaining the SASB Standards
        11.4 | 11.4. The initial development of the TCFD Framework
    12 | 12. How companies disclose sustainability-related financial information
        12.1 | 12.1. Introduction to sample disclosures
        12.2 | 12.2. Why do companies disclose investor-focused sustainability information?
        12.3 | 12.3. Where do companies disclose investor-focused sustainability information?
        12.4 | 12.4. What investor-focused sustainability information are companies reporting?
        12.5 | 12.5. How is investor-focused sustainability information being disclosed?
part-iv | PART IV: CORPORATE AND INVESTOR USE: GOING BEYOND DISCLOSURE
    13 | 13. A closer look: investor demand for sustainability information
        13.1 | 13.1. A global call for enhanced disclosure
        13.2 | 13.2. A shift in market paradigms
        13.3 | 13.3. Companies come to call
    14 | 14. Considerations for corporate use
        14.1 | 14.1. Business roles applicable to sustainability disclosure
        14.2 | 14.2. Preparing for disclosure
        14.3 | 14.3. Preparing quality data
        14.4 | 14.4. Reporting material sustainability data
        14.5 | 14.5. Managing sustainability performance
    15 | 15. Considerations for investor use
        15.1 | 15.1. Overview of sustainability in investing
        15.2 | 15.2. A Spectrum of the use of sustainability information
        15.3 | 15.3. Investor application of cross-industry vs. industry-specific sustainability data
        15.4 | 15.4. The pre-investment stage
        15.5 | 15.5. Index construction and sector allocation
        15.6 | 15.6. Post-investment engagement
        15.7 | 15.7. Investor reporting
        15.8 | 15.8. Creating an effective framework
        15.9 | 15.9. Data is the backbone
"""


def parse_outline(outline: str, indent: int = 4) -> list[CourseTopic]:
    """
    Build a topic forest from an indented outline.

    Args:
        outline: Lines of "<id> | <title>", children indented under parents
        indent: Spaces per nesting level

    Returns:
        Root topics in outline order
    """
    # Each stack entry is (depth, id, title, children)
    stack: list[tuple[int, str, str, list]] = []
    roots: list[tuple[str, str, list]] = []

    for line_number, line in enumerate(outline.splitlines(), 1):
        if not line.strip():
            continue
        stripped = line.lstrip(" ")
        depth, remainder = divmod(len(line) - len(stripped), indent)
        if remainder:
            raise ValueError(f"Line {line_number}: indentation is not a multiple of {indent}")
        topic_id, sep, title = stripped.partition(" | ")
        if not sep or not topic_id.strip() or not title.strip():
            raise ValueError(f"Line {line_number}: expected '<id> | <title>'")

        while stack and stack[-1][0] >= depth:
            stack.pop()
        if depth > (stack[-1][0] + 1 if stack else 0):
            raise ValueError(f"Line {line_number}: nested too deep")

        node = (topic_id.strip(), title.strip(), [])
        if stack:
            stack[-1][3].append(node)
        else:
            roots.append(node)
        stack.append((depth, *node))

    def build(node: tuple[str, str, list]) -> CourseTopic:
        topic_id, title, children = node
        return CourseTopic(
            id=topic_id,
            title=title,
            sub_topics=tuple(build(child) for child in children),
        )

    return [build(root) for root in roots]


CURRICULUM_TOPICS: tuple[CourseTopic, ...] = tuple(parse_outline(CURRICULUM_OUTLINE))
