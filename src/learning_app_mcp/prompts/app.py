"""Prompt templates for the two-stage learning-app generation.

1. SPEC_FROM_VIDEO_PROMPT — sent with the video attached; the model must
   answer with a JSON object carrying a ``spec`` field.
2. SPEC_ADDENDUM — appended to every derived spec. The spec (with addendum)
   is the whole stage-two prompt, so the addendum carries the output-format
   rules the code extractor depends on.
3. CODE_REGION_OPENER / CODE_REGION_CLOSER — fence the HTML document in the
   stage-two answer. Only the closer bounds extraction.
"""

from __future__ import annotations

CODE_REGION_OPENER = "```"
CODE_REGION_CLOSER = "```"

SPEC_FROM_VIDEO_PROMPT = """\
You are a pedagogist and product designer with deep expertise in crafting \
engaging learning experiences via interactive web apps.

Examine the contents of the attached video. Then, write a detailed and \
carefully considered spec for an interactive web app designed to complement \
the video and reinforce its key idea or ideas. The recipient of the spec does \
not have access to the video, so the spec must be thorough and self-contained \
(the spec must not mention that it is based on a video).

Here is an example of a spec written in response to a video about functional \
harmony:

"In music, chords create expectations of movement toward certain other \
chords and resolution towards a tonal center. This is called functional \
harmony.

Build me an interactive web app to help a learner understand the concept of \
functional harmony.

SPECIFICATIONS:
1. The app must feature an interactive keyboard.
2. The app must showcase all 7 diatonic triads that can be created in a major \
key (i.e., tonic, supertonic, mediant, subdominant, dominant, submediant, \
leading chord).
3. The app must somehow describe the function of each of the diatonic triads, \
and state which other chords each triad tends to lead to.
4. The app must provide a way for users to play different chords in sequence \
and see the results.
[etc.]"

The goal of the app that is to be built based on the spec is to enhance \
understanding through simple and playful design. The provided spec should not \
be overly complex, i.e., a junior web developer should be able to implement \
it in a single html file (with all styles and scripts inline). Most \
importantly, the spec must clearly outline the core mechanics of the app, and \
those mechanics must be highly effective in reinforcing the given video's key \
idea(s).

Provide the result as a JSON object containing a single field called "spec", \
whose value is the spec for the web app."""

SPEC_ADDENDUM = f"""

The app must be fully responsive and function properly on both desktop and \
mobile. Provide the code as a single, self-contained HTML document. All \
styles and scripts must be inline. In the result, encase the code between \
"{CODE_REGION_OPENER}" and "{CODE_REGION_CLOSER}" for easy parsing."""
