"""Bundled catalog used when no CATALOG_PATH is configured."""

from .models import Catalog, Collection, ContentItem, ResourceLink


def _videos(collection_id: str, rows: list[tuple[str, str, str, int, str]]) -> tuple[ContentItem, ...]:
    return tuple(
        ContentItem(
            id=item_id,
            collection_id=collection_id,
            title=title,
            url=f"https://www.youtube.com/embed/{youtube_id}",
            duration_seconds=duration,
            description=description,
        )
        for item_id, title, youtube_id, duration, description in rows
    )


HTML_PATH = Collection(
    id="html",
    category="html",
    title="HTML Learning Path",
    description="Master the structure of web pages with HTML.",
    items=_videos(
        "html",
        [
            ("html1", "HTML Basics: Tags and Structure", "ok-plXXHl2w", 1835,
             "Learn the foundational tags and structure of HTML."),
            ("html2", "Creating Interactive HTML Forms", "YwbIeMlxZAU", 1210,
             "Understand how to create interactive forms for user input."),
            ("html3", "Semantic HTML for Accessibility & SEO", "bWPMSSsVdPk", 945,
             "Improve accessibility and SEO with semantic elements."),
            ("html4", "HTML Tables for Data Display", "N692qBST32c", 1100,
             "Learn how to structure and display tabular data effectively."),
            ("html5", "Embedding Media: Images & Video", "3_lAb8m9MpY", 780,
             "Understand how to embed images and videos into your web pages."),
        ],
    ),
)

CSS_PATH = Collection(
    id="css",
    category="css",
    title="CSS Learning Path",
    description="Style your web pages and create stunning layouts.",
    items=_videos(
        "css",
        [
            ("css1", "CSS Fundamentals: Selectors & Properties", "1Rs2ND1ryYc", 2450,
             "Grasp the core concepts of CSS styling, selectors, and basic properties."),
            ("css2", "Mastering Layout with Flexbox", "fYq5PXgSsbE", 1560,
             "A comprehensive guide to designing flexible layouts using Flexbox."),
            ("css3", "Building Complex Layouts with CSS Grid", "jV8B24rSN5o", 1880,
             "Learn to build complex, two-dimensional layouts easily with CSS Grid."),
            ("css4", "Responsive Design Principles", "srvUrASWNUc", 1300,
             "Make your websites look great on all devices using media queries."),
            ("css5", "CSS Transitions and Animations", "zH5pgsAQUqs", 1050,
             "Add life to your web pages with smooth transitions and animations."),
        ],
    ),
)

JAVASCRIPT_PATH = Collection(
    id="javascript",
    category="javascript",
    title="JavaScript Learning Path",
    description="Add interactivity and logic to your websites.",
    items=_videos(
        "javascript",
        [
            ("js1", "JavaScript Introduction: Variables & Data Types", "W6NZfCO5SIk", 3660,
             "Start coding with the basics of JavaScript, including variables and data types."),
            ("js2", "DOM Manipulation: Interacting with HTML", "y17RuWkWdn8", 2140,
             "Learn how to select and modify HTML elements dynamically using JavaScript."),
            ("js3", "Asynchronous JavaScript: Callbacks, Promises, Async/Await", "8aGhZQkoFbQ", 2790,
             "Understand how to handle asynchronous operations effectively in JavaScript."),
            ("js4", "Working with Arrays and Objects", "R8rmfD9Y5-c", 1950,
             "Learn essential methods for manipulating arrays and objects in JS."),
            ("js5", "Introduction to ES6+ Features", "NCwa_xi0ZQk", 1600,
             "Explore modern JavaScript features like arrow functions, destructuring, and more."),
        ],
    ),
)

RESOURCES: dict[str, tuple[ResourceLink, ...]] = {
    "html": (
        ResourceLink(id="html-mdn", title="MDN Web Docs: HTML", url="https://developer.mozilla.org/en-US/docs/Web/HTML",
                     description="Comprehensive HTML documentation by Mozilla.", type="documentation"),
        ResourceLink(id="html-w3schools", title="W3Schools HTML Tutorial", url="https://www.w3schools.com/html/",
                     description="Interactive HTML tutorials and references.", type="guide"),
        ResourceLink(id="html-validator", title="W3C Markup Validation Service", url="https://validator.w3.org/",
                     description="Check the markup validity of HTML documents.", type="tool"),
    ),
    "css": (
        ResourceLink(id="css-mdn", title="MDN Web Docs: CSS", url="https://developer.mozilla.org/en-US/docs/Web/CSS",
                     description="In-depth CSS documentation and guides.", type="documentation"),
        ResourceLink(id="css-tricks", title="CSS-Tricks", url="https://css-tricks.com/",
                     description="Articles, guides, and almanac for CSS techniques.", type="article"),
        ResourceLink(id="css-flexbox-guide", title="A Complete Guide to Flexbox",
                     url="https://css-tricks.com/snippets/css/a-guide-to-flexbox/",
                     description="Detailed guide on CSS Flexbox.", type="guide"),
    ),
    "javascript": (
        ResourceLink(id="js-mdn", title="MDN Web Docs: JavaScript",
                     url="https://developer.mozilla.org/en-US/docs/Web/JavaScript",
                     description="The ultimate JavaScript reference by Mozilla.", type="documentation"),
        ResourceLink(id="js-eloquent", title="Eloquent JavaScript", url="https://eloquentjavascript.net/",
                     description="A modern introduction to programming with JavaScript.", type="guide"),
        ResourceLink(id="js-info", title="The Modern JavaScript Tutorial", url="https://javascript.info/",
                     description="From basic to advanced topics with simple, but detailed explanations.", type="guide"),
    ),
}

DEFAULT_CATALOG = Catalog(
    categories={
        "html": (HTML_PATH,),
        "css": (CSS_PATH,),
        "javascript": (JAVASCRIPT_PATH,),
    },
    resources=RESOURCES,
)
