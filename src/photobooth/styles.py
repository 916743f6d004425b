"""Style prompts sent to the image-generation service."""

STYLE_PROMPTS: dict[str, str] = {
    "vintage": (
        "Apply vintage 1970s film photograph style to this portrait: warm amber "
        "color tones, natural film grain texture, slightly faded highlights, and "
        "soft vignette edges. Maintain the person's exact facial features, "
        "expression, hairstyle, and pose while applying the vintage color treatment."
    ),
    "comic": (
        "Apply bold comic book illustration style to this portrait: thick black "
        "ink outlines around features, cel-shaded flat coloring, halftone dot "
        "patterns in shadow areas, high dynamic contrast. Maintain the person's "
        "exact facial features, expression, and pose while adding the comic art "
        "rendering style."
    ),
    "renaissance": (
        "Add dramatic Renaissance-style chiaroscuro lighting to this portrait: "
        "warm golden light from one side casting soft shadows across the face, "
        "rich deep shadows on the opposite side. Add a dark, painterly background "
        "with subtle texture. Maintain the person's exact facial features, "
        "expression, and likeness - apply only lighting and background changes."
    ),
    "cyberpunk": (
        "Add cyberpunk neon lighting effects to this portrait: bright pink and "
        "cyan rim lights on the edges of the face and hair, subtle purple ambient "
        "glow. Add a dark futuristic city background with neon signs. Maintain "
        "the person's exact facial features, expression, and pose - apply only "
        "lighting and background changes."
    ),
    "watercolor": (
        "Apply delicate watercolor painting style to this portrait: soft flowing "
        "colors that blend at edges, visible paper texture throughout, gentle "
        "brushstroke effects, slightly muted pastel tones. Maintain the person's "
        "exact facial features, expression, and likeness while applying the "
        "watercolor artistic rendering."
    ),
    "pop-art": (
        "Apply bold Andy Warhol-style pop art treatment to this portrait: flatten "
        "colors into bright graphic blocks, dramatically increase contrast, add "
        "halftone dot patterns in midtones and shadows, use vibrant saturated "
        "colors. Maintain the person's exact face shape, features, and expression "
        "while applying the pop art color style."
    ),
    "sketch": (
        "Transform into a detailed pencil sketch drawing: graphite shading with "
        "crosshatching, clean defined lines, visible paper texture, high "
        "contrast. Keep the exact likeness."
    ),
    "sparkle": (
        "Add sparkle and glitter effects: scattered light particles, shimmer "
        "highlights on skin and hair, magical glow effect. Keep the photo "
        "otherwise unchanged."
    ),
    "disco": (
        "Add disco party lighting: colorful light spots, rainbow bokeh effects in "
        "background, warm party atmosphere glow. Keep the person exactly the same."
    ),
    "polaroid": (
        "Apply instant camera effect: slightly washed out colors, warm color "
        "cast, soft focus edges, characteristic Polaroid color tones. Keep the "
        "person unchanged."
    ),
    "pixel": (
        "Transform into pixel art: chunky visible pixels like 8-bit retro video "
        "game, limited color palette, blocky features. Keep recognizable likeness."
    ),
}
