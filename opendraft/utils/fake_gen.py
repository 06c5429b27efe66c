import random
from faker import Faker
from faker.providers import BaseProvider


class OpenDraftProvider(BaseProvider):
    """
    OpenDraft 演示数据生成器
    生成博客风格的标题和 TipTap 文档树
    """

    topics = [
        'Python', 'Flask', 'PostgreSQL', 'Caching', 'Design Systems',
        'Accessibility', 'Typography', 'Remote Work', 'Testing', 'Observability',
    ]

    title_patterns = [
        'A Practical Guide to {}',
        '{} in Ten Minutes',
        'What I Learned About {}',
        'Getting Started with {}',
        'Why {} Matters',
        'The Hidden Costs of {}',
    ]

    def content_title(self):
        return random.choice(self.title_patterns).format(random.choice(self.topics))

    def topic(self):
        return random.choice(self.topics)

    def tiptap_doc(self, paragraphs=3):
        """生成一个包含标题和若干段落的 TipTap 文档"""
        nodes = [{
            'type': 'heading',
            'attrs': {'level': 2},
            'content': [{'type': 'text', 'text': self.generator.sentence(nb_words=4).rstrip('.')}],
        }]
        for _ in range(paragraphs):
            nodes.append({
                'type': 'paragraph',
                'content': [{'type': 'text', 'text': self.generator.paragraph(nb_sentences=4)}],
            })
        return {'type': 'doc', 'content': nodes}


fake = Faker()
fake.add_provider(OpenDraftProvider)
